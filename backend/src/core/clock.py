"""Clock - wall-clock instant and local calendar date.

The tracker asks a clock object for the time instead of reading it directly,
so tests can pin both values.
"""

from datetime import datetime
from typing import Protocol

from .models import utc_now


def local_date_key(moment: datetime) -> str:
    """Format the local calendar day of a moment as YYYY-MM-DD.

    Aware datetimes are converted to the host's local time first; naive ones
    are taken as local already. No UTC normalization: near midnight two hosts
    in different timezones produce different keys.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> str: ...


class SystemClock:
    """Clock backed by the host's time and timezone."""

    def now(self) -> datetime:
        return utc_now()

    def today(self) -> str:
        return local_date_key(datetime.now())
