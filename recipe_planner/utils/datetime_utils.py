"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from recipe_planner.utils.datetime_utils import utc_now

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)
"""

from datetime import date, datetime, time, timedelta, timezone


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def start_of_day(day: date) -> datetime:
    """Return midnight at the beginning of ``day``."""
    return datetime.combine(day, time.min)


def start_of_next_day(day: date) -> datetime:
    """Return midnight at the beginning of the day after ``day``.

    Used as an exclusive upper bound so that an inclusive calendar-date
    filter matches every timestamp on ``day``.
    """
    return datetime.combine(day + timedelta(days=1), time.min)
