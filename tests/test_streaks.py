from datetime import datetime, timedelta, timezone

import pytest

from greencredits.services.streaks import StreakTracker, advance_streak, calendar_day, streak_multiplier

IST = timezone(timedelta(hours=5, minutes=30))


@pytest.mark.parametrize(
    "streak, multiplier",
    [(0, 1), (1, 1), (2, 1), (3, 2), (6, 2), (7, 3), (30, 3)],
)
def test_multiplier_tiers(streak, multiplier):
    assert streak_multiplier(streak) == multiplier


def test_first_report_starts_streak():
    update = advance_streak(0, 0, None, datetime(2025, 3, 1, 6, 0))
    assert update.current_streak == 1
    assert update.longest_streak == 1
    assert update.multiplier == 1


def test_consecutive_day_extends_streak():
    update = advance_streak(6, 6, datetime(2025, 3, 1, 6, 0), datetime(2025, 3, 2, 6, 0))
    assert update.current_streak == 7
    assert update.longest_streak == 7
    assert update.multiplier == 3


def test_gap_resets_streak_but_keeps_longest():
    update = advance_streak(9, 12, datetime(2025, 3, 1, 6, 0), datetime(2025, 3, 4, 6, 0))
    assert update.current_streak == 1
    assert update.longest_streak == 12
    assert update.multiplier == 1


def test_same_day_keeps_streak():
    update = advance_streak(4, 4, datetime(2025, 3, 1, 6, 0), datetime(2025, 3, 1, 9, 0))
    assert update.current_streak == 4
    assert update.multiplier == 2


def test_earlier_timestamp_treated_as_same_day():
    update = advance_streak(2, 5, datetime(2025, 3, 5, 6, 0), datetime(2025, 3, 3, 6, 0))
    assert update.current_streak == 2
    assert update.longest_streak == 5


def test_calendar_day_uses_configured_offset():
    # 20:00 UTC is already the next day in IST
    instant = datetime(2025, 3, 1, 20, 0)
    assert calendar_day(instant).day == 1
    assert calendar_day(instant, IST).day == 2


def test_days_counted_in_local_calendar():
    last = datetime(2025, 3, 1, 17, 0)   # 22:30 IST on the 1st
    now = datetime(2025, 3, 1, 19, 0)    # 00:30 IST on the 2nd
    assert advance_streak(1, 1, last, now, IST).current_streak == 2
    assert advance_streak(1, 1, last, now).current_streak == 1


def test_tracker_reads_user_fields():
    class U:
        current_streak = 2
        longest_streak = 2
        last_report_at = datetime(2025, 3, 1, 6, 0)

    update = StreakTracker(IST).update(U(), datetime(2025, 3, 2, 6, 0))
    assert (update.current_streak, update.multiplier) == (3, 2)
