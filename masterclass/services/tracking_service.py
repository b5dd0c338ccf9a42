"""Replay video view tracking keyed by opaque tokens."""
import logging
from datetime import datetime
from typing import Any, Callable, Dict

from masterclass.models.view_record import ViewRecord
from masterclass.utils.date_utils import to_iso_utc, utc_now

logger = logging.getLogger(__name__)


def normalize_token(raw: Any) -> str:
    """Token as a trimmed string; None becomes ""."""
    if raw is None:
        return ""
    return str(raw).strip()


def parse_watched_seconds(raw: Any) -> int:
    """
    Coerce a watchedSeconds value to whole seconds.

    Behavior:
        - Numbers and numeric strings are truncated toward zero
        - Missing, non-numeric, NaN or infinite values count as 0
    """
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return 0


class TrackingService:
    """Maintains {token: {watched, completed, lastPing}} in a JSON store."""

    def __init__(self, store, clock: Callable[[], datetime] = utc_now):
        """
        Args:
            store: Object with read() and update(mutate) over a JSON mapping
            clock: Returns the current aware datetime
        """
        self.store = store
        self.clock = clock

    def _apply(self, token: str, change: Callable[[ViewRecord], None]) -> ViewRecord:
        result = {}

        def mutate(views: Any) -> Dict[str, Any]:
            if not isinstance(views, dict):
                views = {}
            record = ViewRecord.from_dict(views.get(token) or {})
            change(record)
            record.last_ping = to_iso_utc(self.clock())
            views[token] = record.to_dict()
            result["record"] = record
            return views

        self.store.update(mutate)
        return result["record"]

    def record_progress(self, token: Any, watched_seconds: Any) -> bool:
        """
        Raise a token's watched high-water mark.

        Args:
            token: Opaque token from the replay link
            watched_seconds: Seconds watched so far as reported by the player

        Returns:
            True if the store was updated, False for an empty token
        """
        token = normalize_token(token)
        if not token:
            return False

        watched = parse_watched_seconds(watched_seconds)

        def change(record: ViewRecord) -> None:
            record.watched = max(record.watched, watched)

        self._apply(token, change)
        return True

    def mark_completed(self, token: Any) -> bool:
        """Flag a token as having watched to the end. False for an empty token."""
        token = normalize_token(token)
        if not token:
            return False

        def change(record: ViewRecord) -> None:
            record.completed = True

        self._apply(token, change)
        logger.info(f"Replay completed for token {token}")
        return True

    def get_all_views(self) -> Dict[str, Any]:
        views = self.store.read()
        return views if isinstance(views, dict) else {}
