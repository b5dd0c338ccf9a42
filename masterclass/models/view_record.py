"""Video view tracking model."""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ViewRecord:
    """Progress of one tracking token on the replay page."""

    watched: int = 0
    completed: bool = False
    last_ping: Optional[str] = None  # ISO 8601 format

    def to_dict(self) -> Dict[str, Any]:
        return {
            "watched": self.watched,
            "completed": self.completed,
            "lastPing": self.last_ping,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ViewRecord":
        """Build a record, tolerating missing or malformed fields."""
        try:
            watched = int(data.get("watched") or 0)
        except (TypeError, ValueError):
            watched = 0
        return cls(
            watched=watched,
            completed=bool(data.get("completed", False)),
            last_ping=data.get("lastPing"),
        )
