"""Date and time utility functions."""
from datetime import datetime, timedelta, timezone
from typing import Iterable
from zoneinfo import ZoneInfo


FRENCH_WEEKDAYS = ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"]
FRENCH_MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_session(value: str, default_tz: str = "Europe/Paris") -> datetime:
    """
    Parse a submitted session timestamp.

    Args:
        value: ISO 8601 string (e.g., "2025-08-23T20:00:00.000Z")
        default_tz: Zone used when the string carries no UTC offset

    Returns:
        Aware datetime in UTC

    Raises:
        ValueError: If the string is not a valid ISO 8601 timestamp or lies
            outside the datetime range
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Session timestamp cannot be empty")

    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=ZoneInfo(default_tz))
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid session timestamp: {value}") from e


def to_iso_utc(moment: datetime) -> str:
    """
    Format an aware datetime as UTC ISO 8601 with millisecond precision.

    Example: 2025-08-23 22:00 Europe/Paris -> "2025-08-23T20:00:00.000Z"
    """
    moment = moment.astimezone(timezone.utc)
    return moment.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def compute_send_time(event_time: datetime, offset: timedelta) -> datetime:
    """Return the wall-clock time at which a reminder with the given offset fires."""
    return event_time + offset


def seconds_until(moment: datetime, now: datetime) -> float:
    """Return seconds from now until moment (negative when moment is past)."""
    return (moment - now).total_seconds()


def is_due(moment: datetime, now: datetime) -> bool:
    """Check whether a send time has been reached."""
    return moment <= now


def format_session_fr(moment: datetime, tz: str = "Europe/Paris") -> str:
    """
    Format a session for French readers in the site timezone.

    Example: "samedi 23 août 2025 à 22:00"
    """
    local = moment.astimezone(ZoneInfo(tz))
    return (
        f"{FRENCH_WEEKDAYS[local.weekday()]} {local.day} "
        f"{FRENCH_MONTHS[local.month - 1]} {local.year} à {local:%H:%M}"
    )


def check_schedulable(moment: datetime, offsets: Iterable[timedelta], tz: str = "Europe/Paris") -> None:
    """
    Ensure every send time around a session is a representable datetime.

    Raises:
        ValueError: If the session or any moment + offset falls outside the
            datetime range, in UTC or in the site timezone
    """
    zone = ZoneInfo(tz)
    try:
        moment.astimezone(zone)
        for offset in offsets:
            compute_send_time(moment, offset).astimezone(zone)
    except OverflowError as e:
        raise ValueError(f"Session timestamp out of range: {moment!r}") from e
