from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Optional

MULTIPLIER_TIERS = (
    (7, 3),
    (3, 2),
)


@dataclass(frozen=True)
class StreakUpdate:
    current_streak: int
    longest_streak: int
    multiplier: int
    last_report_at: datetime


def streak_multiplier(streak: int) -> int:
    for min_streak, multiplier in MULTIPLIER_TIERS:
        if streak >= min_streak:
            return multiplier
    return 1


def calendar_day(instant: datetime, tz: tzinfo = timezone.utc) -> date:
    # mongo hands back naive UTC datetimes
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).date()


def advance_streak(
    current_streak: int,
    longest_streak: int,
    last_report_at: Optional[datetime],
    submitted_at: datetime,
    tz: tzinfo = timezone.utc,
) -> StreakUpdate:
    if last_report_at is None:
        streak = 1
    else:
        days = (calendar_day(submitted_at, tz) - calendar_day(last_report_at, tz)).days
        if days == 1:
            streak = current_streak + 1
        elif days > 1:
            streak = 1
        else:
            # same day (or a clock that went backwards): no extra step
            streak = max(current_streak, 1)

    return StreakUpdate(
        current_streak=streak,
        longest_streak=max(longest_streak, streak),
        multiplier=streak_multiplier(streak),
        last_report_at=submitted_at,
    )


class StreakTracker:
    def __init__(self, tz: tzinfo = timezone.utc):
        self.tz = tz

    def update(self, user, submitted_at: datetime) -> StreakUpdate:
        return advance_streak(
            user.current_streak,
            user.longest_streak,
            user.last_report_at,
            submitted_at,
            self.tz,
        )
