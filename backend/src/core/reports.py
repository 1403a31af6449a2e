"""Report Generation - Daily buckets and multi-day history.

All functions are pure: same input always produces same output, no side effects.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable

from .macros import calculate_daily_totals, round_for_display
from .models import DaySummary, LogEntry


def bucket_by_day(entries: Iterable[LogEntry]) -> dict[str, list[LogEntry]]:
    """Group log entries by their calendar-day key.

    Args:
        entries: Log entries from any number of days

    Returns:
        Mapping of YYYY-MM-DD to that day's entries, in input order
    """
    buckets: dict[str, list[LogEntry]] = defaultdict(list)
    for entry in entries:
        buckets[entry.date].append(entry)
    return dict(buckets)


def generate_day_summary(date_key: str, entries: list[LogEntry]) -> DaySummary:
    """Summarize one day's entries with display-rounded totals."""
    return DaySummary(
        date=date_key,
        totals=round_for_display(calculate_daily_totals(entries)),
        entry_count=len(entries),
    )


def history_range(today: str, days: int) -> tuple[str, str]:
    """Return the (start, end) date keys covering ``days`` days up to today.

    Args:
        today: Today's date key
        days: Number of days, today included (at least 1)

    Raises:
        ValueError: If days is less than 1, reaches before year 1, or today
            is not a valid key
    """
    if days < 1:
        raise ValueError("days must be at least 1")
    end = date.fromisoformat(today)
    try:
        start = end - timedelta(days=days - 1)
    except OverflowError:
        raise ValueError("days is out of range") from None
    return start.isoformat(), end.isoformat()


def generate_history(entries: Iterable[LogEntry], start: str, end: str) -> list[DaySummary]:
    """Summarize every logged day between start and end (inclusive).

    Days without entries are omitted. Keys are zero-padded, so string
    comparison orders them chronologically.

    Args:
        entries: Log entries (entries outside the range are ignored)
        start: First date key
        end: Last date key

    Returns:
        DaySummary list sorted by date
    """
    in_range = [e for e in entries if start <= e.date <= end]
    buckets = bucket_by_day(in_range)
    return [generate_day_summary(key, buckets[key]) for key in sorted(buckets)]
