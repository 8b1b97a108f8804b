"""
ISO week helpers.

Supplies the "current week" to the capacity forecast so the engine
itself never reads the clock.
"""

from datetime import date, timedelta
from typing import Optional


def iso_week(day: date) -> tuple[int, int]:
    """
    Get the ISO (year, week) for a date.

    Examples:
        - 2026-01-01 (Thursday) → (2026, 1)
        - 2027-01-01 (Friday)   → (2026, 53)
    """
    iso = day.isocalendar()
    return iso[0], iso[1]


def current_iso_week(today: Optional[date] = None) -> tuple[int, int]:
    """Get the ISO (year, week) for today, or for the given date."""
    return iso_week(today or date.today())


def weeks_in_year(year: int) -> int:
    """Number of ISO weeks in a year (52 or 53). Dec 28 is always in the last week."""
    return date(year, 12, 28).isocalendar()[1]


def is_valid_week(week: int, year: Optional[int] = None) -> bool:
    """Check a week number against the year's ISO week count (53 if year unknown)."""
    last_week = weeks_in_year(year) if year is not None else 53
    return 1 <= week <= last_week


def advance_week(
    week: int,
    offset: int,
    year: Optional[int] = None
) -> tuple[int, Optional[int]]:
    """
    Move a week number forward by offset weeks.

    With a year, wraps at 52 or 53 per ISO rules and returns the new year.
    Without a year, wraps after week 52 (or after the start week if it is 53)
    and returns None for the year.

    Args:
        week: Starting ISO week (1-53)
        offset: Weeks to move forward (>= 0)
        year: ISO year of the starting week, if known

    Returns:
        (week, year) tuple

    Raises:
        ValueError: If week does not exist in the given year
    """
    if year is None:
        cycle = max(52, week)
        return (week - 1 + offset) % cycle + 1, None

    monday = date.fromisocalendar(year, week, 1) + timedelta(weeks=offset)
    new_year, new_week = iso_week(monday)
    return new_week, new_year
