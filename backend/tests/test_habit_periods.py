from datetime import date, datetime, timezone

import pytz

from habit_hub.services.habit_periods import as_utc, month_bounds, period_start, week_bounds

EASTERN = pytz.timezone("America/New_York")


def test_daily_period_starts_at_local_midnight():
    # Wednesday 2024-05-15 14:30 Eastern
    now = EASTERN.localize(datetime(2024, 5, 15, 14, 30))
    start = period_start("daily", now, tz=EASTERN)
    assert start == EASTERN.localize(datetime(2024, 5, 15, 0, 0))


def test_weekly_period_starts_on_previous_sunday():
    now = EASTERN.localize(datetime(2024, 5, 15, 14, 30))
    start = period_start("weekly", now, tz=EASTERN)
    assert start == EASTERN.localize(datetime(2024, 5, 12, 0, 0))
    assert start.weekday() == 6


def test_weekly_period_on_sunday_is_today():
    now = EASTERN.localize(datetime(2024, 5, 12, 0, 5))
    assert period_start("weekly", now, tz=EASTERN) == EASTERN.localize(datetime(2024, 5, 12))


def test_period_uses_local_date_not_utc_date():
    # 02:00 UTC on Thursday is still Wednesday evening in New York
    now = datetime(2024, 5, 16, 2, 0, tzinfo=timezone.utc)
    start = period_start("daily", now, tz=EASTERN)
    assert start.date() == date(2024, 5, 15)


def test_week_bounds():
    start, end = week_bounds(date(2024, 5, 15), tz=pytz.UTC)
    assert start == datetime(2024, 5, 12, tzinfo=pytz.UTC)
    assert end.date() == date(2024, 5, 18)
    assert end.hour == 23 and end.minute == 59


def test_month_bounds():
    start, end = month_bounds(date(2024, 2, 10), tz=pytz.UTC)
    assert start == datetime(2024, 2, 1, tzinfo=pytz.UTC)
    assert end.date() == date(2024, 2, 29)


def test_as_utc_treats_naive_as_utc():
    naive = datetime(2024, 5, 15, 12, 0)
    assert as_utc(naive) == datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)
    aware = EASTERN.localize(datetime(2024, 5, 15, 8, 0))
    assert as_utc(aware) == datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)
