"""Registration data model for masterclass sign-ups."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class Registration:
    """A person who signed up for a masterclass session."""

    first_name: str
    last_name: str
    email: str
    session: str  # UTC ISO 8601 format, e.g. "2025-08-23T20:00:00.000Z"

    def __post_init__(self):
        """Validate registration data."""
        if not self.first_name or not self.first_name.strip():
            raise ValueError("First name cannot be empty")
        if not self.email or not self.email.strip():
            raise ValueError("Email cannot be empty")

        try:
            datetime.fromisoformat(self.session.replace('Z', '+00:00'))
        except ValueError as e:
            raise ValueError(f"Invalid session timestamp: {self.session}") from e

    @property
    def session_time(self) -> datetime:
        """Session as an aware datetime."""
        return datetime.fromisoformat(self.session.replace('Z', '+00:00'))

    def to_dict(self) -> Dict[str, str]:
        """Serialize using the stored JSON field names."""
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "session": self.session,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Registration":
        return cls(
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            email=data.get("email", ""),
            session=data.get("session", ""),
        )
