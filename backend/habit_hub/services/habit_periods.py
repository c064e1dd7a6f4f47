"""
Habit Period Service - tracking window boundaries for daily and weekly habits
"""

import calendar
from datetime import datetime, date, time, timedelta, timezone
from typing import Optional, Tuple, Union
import pytz

from habit_hub.core.config import settings
from habit_hub.services.habit_types import HabitFrequency


def local_timezone():
    return pytz.timezone(settings.timezone)


def _localize(tz, value: datetime) -> datetime:
    # pytz zones need localize(); plain tzinfo objects take replace()
    if hasattr(tz, "localize"):
        return tz.localize(value)
    return value.replace(tzinfo=tz)


def _local_now(now: Optional[datetime], tz) -> datetime:
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return _localize(tz, now)
    return now.astimezone(tz)


def _sunday_on_or_before(day: date) -> date:
    # date.weekday(): Monday is 0, Sunday is 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def period_start(
    frequency: Union[str, HabitFrequency],
    now: Optional[datetime] = None,
    tz=None
) -> datetime:
    """
    Inclusive start of the current tracking period.

    daily  -> local midnight today
    weekly -> local midnight of the most recent Sunday (today if Sunday)

    Only a lower bound: reports stamped after `now` still belong to the period.
    """
    tz = tz or local_timezone()
    frequency = HabitFrequency(frequency)
    local_now = _local_now(now, tz)

    day = local_now.date()
    if frequency == HabitFrequency.WEEKLY:
        day = _sunday_on_or_before(day)

    return _localize(tz, datetime.combine(day, time.min))


def week_bounds(day: date, tz=None) -> Tuple[datetime, datetime]:
    """Sunday 00:00 through Saturday end of day for the week containing `day`"""
    tz = tz or local_timezone()
    start_day = _sunday_on_or_before(day)
    end_day = start_day + timedelta(days=6)
    return (
        _localize(tz, datetime.combine(start_day, time.min)),
        _localize(tz, datetime.combine(end_day, time.max)),
    )


def month_bounds(day: date, tz=None) -> Tuple[datetime, datetime]:
    """First day 00:00 through last day end of day for the month containing `day`"""
    tz = tz or local_timezone()
    last = calendar.monthrange(day.year, day.month)[1]
    return (
        _localize(tz, datetime.combine(day.replace(day=1), time.min)),
        _localize(tz, datetime.combine(day.replace(day=last), time.max)),
    )


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values coming back from the database are UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
