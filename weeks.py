"""
Week bucketing

Every vote is tagged with the Monday (00:00 local) of the week it was cast in.
Sunday belongs to the week that started the Monday before it.
"""

from datetime import date, datetime, timedelta
from typing import Optional

THURSDAY = 3  # date.weekday()


def week_start(moment: datetime) -> datetime:
    """Return the Monday of the week containing ``moment`` at midnight.

    Works for naive (local) and timezone-aware datetimes; the result keeps the
    tzinfo of the input.
    """
    monday = moment - timedelta(days=moment.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def to_epoch_ms(moment: datetime) -> int:
    return int(round(moment.timestamp() * 1000))


def week_start_ms(moment: datetime) -> int:
    """Week bucket of ``moment`` as epoch milliseconds (the stored ``weekStart``)."""
    return to_epoch_ms(week_start(moment))


def current_week_start(now: Optional[datetime] = None) -> int:
    return week_start_ms(now or datetime.now())


def this_thursday(today: Optional[date] = None) -> date:
    """The Thursday on or after ``today``."""
    today = today or date.today()
    return today + timedelta(days=(THURSDAY - today.weekday()) % 7)


def thursday_label(today: Optional[date] = None) -> str:
    # e.g. "October 23, 2025"
    thursday = this_thursday(today)
    return f"{thursday:%B} {thursday.day}, {thursday.year}"
