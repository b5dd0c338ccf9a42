"""Reminder job model."""
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class ReminderJob:
    """One email to send at a signed offset from the session start."""

    offset: timedelta
    recipient: str
    subject: str
    body: str
