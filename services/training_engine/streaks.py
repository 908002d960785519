"""
Streak / Consistency Calculator

"Consistency is the leading indicator of success."

Daily streaks and weekly session counts derived from session timestamps.
Multiple sessions on one calendar day count once toward the streak. A streak
is broken (0) once the most recent session day is more than one day before
today; it stays visible in history, it just stops counting.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Union

from .errors import InvalidInputError

DateLike = Union[date, datetime]

# Celebrations for daily streak milestones
STREAK_MILESTONES: Dict[int, str] = {
    3: "🔥 3 days in a row! You're building a habit.",
    5: "⚡ 5-day streak! Your touch is getting sharper.",
    7: "🏆 A full week of training! That's real commitment.",
    14: "💪 Two weeks straight! This is part of who you are now.",
    30: "👑 30 days! You've mastered consistency.",
}


@dataclass(frozen=True)
class ConsistencySummary:
    """Streak and weekly counts for display."""
    streak_days: int
    weekly_counts: List[int]          # most recent week first
    this_week_count: int
    message: str
    celebration: Optional[str]


def _day(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def _today(today: Optional[DateLike]) -> date:
    return _day(today) if today is not None else date.today()


def calculate_streak(session_dates: Iterable[DateLike], today: Optional[DateLike] = None) -> int:
    """
    Consecutive days with at least one session, ending at the most recent one.

    Returns 0 when there are no sessions or the most recent session day is
    more than 1 day before today. Future-dated entries are ignored.
    """
    today_day = _today(today)
    days = sorted({_day(d) for d in session_dates if _day(d) <= today_day}, reverse=True)
    if not days:
        return 0

    if (today_day - days[0]).days > 1:
        return 0

    streak = 1
    for newer, older in zip(days, days[1:]):
        if (newer - older).days == 1:
            streak += 1
        else:
            break
    return streak


def get_weekly_counts(
    session_dates: Iterable[DateLike],
    weeks: int = 4,
    today: Optional[DateLike] = None,
) -> List[int]:
    """
    Sessions per 7-day bucket, most recent first.

    Bucket = floor(days_between(today, day) / 7). Sessions older than
    weeks * 7 days are dropped; future-dated sessions are skipped.
    """
    if weeks < 0:
        raise InvalidInputError(f"weeks must be >= 0, got {weeks}", field="weeks")

    today_day = _today(today)
    counts = [0] * weeks
    for value in session_dates:
        days_diff = (today_day - _day(value)).days
        if days_diff < 0:
            continue
        week_index = days_diff // 7
        if week_index < weeks:
            counts[week_index] += 1
    return counts


def get_this_week_count(session_dates: Iterable[DateLike], today: Optional[DateLike] = None) -> int:
    """Sessions in the last 7 days, today included."""
    return get_weekly_counts(session_dates, weeks=1, today=today)[0]


def get_streak_milestone(streak: int) -> Optional[str]:
    return STREAK_MILESTONES.get(streak)


def streak_message(streak: int) -> str:
    if streak == 0:
        return "Every session is a fresh start. Let's train!"
    if streak == 1:
        return "Day 1 done. Come back tomorrow to build your streak."
    return f"{streak} days in a row. Keep building!"


def summarize_consistency(
    session_dates: Iterable[DateLike],
    weeks: int = 4,
    today: Optional[DateLike] = None,
) -> ConsistencySummary:
    dates = list(session_dates)
    streak = calculate_streak(dates, today=today)
    counts = get_weekly_counts(dates, weeks=weeks, today=today)
    return ConsistencySummary(
        streak_days=streak,
        weekly_counts=counts,
        this_week_count=get_this_week_count(dates, today=today),
        message=streak_message(streak),
        celebration=get_streak_milestone(streak),
    )
