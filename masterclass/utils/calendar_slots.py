"""Session slot table used by the calendar picker."""
from datetime import date, datetime, timedelta
from typing import Dict, List, Union
from zoneinfo import ZoneInfo


WEEKDAY_SLOTS = ["15:00", "18:30", "20:30"]
FRIDAY_SLOTS = ["09:30", "15:00", "19:30"]
SATURDAY_SLOTS = ["09:30", "14:00", "16:00", "18:30", "20:30"]
SUNDAY_SLOTS = [
    "09:30", "10:30", "11:10", "11:30", "12:30",
    "14:00", "15:00", "17:09", "18:30", "20:30",
]

# Exceptional late session added on top of the usual Saturday slots
DATE_OVERRIDES: Dict[date, List[str]] = {
    date(2025, 8, 23): SATURDAY_SLOTS + ["22:00"],
}

PICKER_WINDOW_DAYS = 14


def slots_for_day(day: Union[date, datetime]) -> List[str]:
    """
    Return the bookable times for a calendar day.

    Args:
        day: Calendar date (a datetime is reduced to its date)

    Returns:
        Ordered list of HH:MM strings

    Behavior:
        - Explicit date overrides win over the weekday table
        - Monday-Thursday, Friday, Saturday and Sunday each have their own set
    """
    if isinstance(day, datetime):
        day = day.date()

    override = DATE_OVERRIDES.get(day)
    if override is not None:
        return list(override)

    weekday = day.weekday()
    if weekday <= 3:
        return list(WEEKDAY_SLOTS)
    if weekday == 4:
        return list(FRIDAY_SLOTS)
    if weekday == 5:
        return list(SATURDAY_SLOTS)
    return list(SUNDAY_SLOTS)


def upcoming_days(today: date, count: int = PICKER_WINDOW_DAYS) -> List[date]:
    """Return count consecutive days starting with today."""
    return [today + timedelta(days=offset) for offset in range(count)]


def compose_session(day: date, time_str: str, tz: str = "Europe/Paris") -> datetime:
    """
    Combine a picked day and HH:MM slot into an aware timestamp.

    Raises:
        ValueError: If time_str is not HH:MM
    """
    try:
        slot = datetime.strptime(time_str.strip(), "%H:%M").time()
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Invalid time format: {time_str}") from e
    return datetime.combine(day, slot, tzinfo=ZoneInfo(tz))


def slot_table(today: date, count: int = PICKER_WINDOW_DAYS) -> List[Dict[str, object]]:
    """Build the picker payload: one {date, slots} entry per upcoming day."""
    return [
        {"date": day.isoformat(), "slots": slots_for_day(day)}
        for day in upcoming_days(today, count)
    ]
