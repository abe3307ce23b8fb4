"""Calendar windows used to filter expenses by date."""

import calendar
from datetime import date, datetime


def month_window(year: int, month: int) -> tuple[datetime, datetime]:
    """
    Get the inclusive window covering one calendar month.

    The window runs from the first day at 00:00:00 to the last day at
    23:59:59.

    Raises:
        ValueError: If month is not between 1 and 12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, 23, 59, 59)
    return start, end


def current_month_window(today: date | None = None) -> tuple[datetime, datetime]:
    """Get the window for the month containing ``today`` (defaults to now)."""
    today = today or date.today()
    return month_window(today.year, today.month)


def resolve_window(
    year: int | None, month: int | None, today: date | None = None
) -> tuple[datetime, datetime]:
    """Use the requested month when both parts are given, else the current one."""
    if year is not None and month is not None:
        return month_window(year, month)
    return current_month_window(today)


def trend_start(months: int, today: date | None = None) -> datetime:
    """
    Get the first day of the month ``months`` before ``today``.

    Args:
        months: How many months to look back (0 means the current month)
        today: Reference date, defaults to now
    """
    if months < 0:
        raise ValueError(f"Months must not be negative, got {months}")

    today = today or date.today()
    index = today.year * 12 + (today.month - 1) - months
    return datetime(index // 12, index % 12 + 1, 1)


def month_key(value: date) -> str:
    """Format a date as a ``YYYY-MM`` month key."""
    return f"{value.year}-{value.month:02d}"
