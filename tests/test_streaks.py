"""
Tests for the Streak / Consistency Calculator
"""
from datetime import date, datetime, timedelta

import pytest

from services.training_engine.errors import InvalidInputError
from services.training_engine.streaks import (
    STREAK_MILESTONES,
    calculate_streak,
    get_streak_milestone,
    get_this_week_count,
    get_weekly_counts,
    streak_message,
    summarize_consistency,
)


TODAY = date(2026, 3, 11)


def days_ago(*offsets):
    return [TODAY - timedelta(days=n) for n in offsets]


class TestCalculateStreak:

    def test_no_sessions(self):
        assert calculate_streak([], today=TODAY) == 0

    def test_consecutive_run_ending_today(self):
        assert calculate_streak(days_ago(0, 1, 2, 5), today=TODAY) == 3

    def test_run_ending_yesterday_still_counts(self):
        assert calculate_streak(days_ago(1, 2), today=TODAY) == 2

    def test_broken_after_a_missed_day(self):
        assert calculate_streak(days_ago(3), today=TODAY) == 0
        assert calculate_streak(days_ago(2, 3, 4), today=TODAY) == 0

    def test_multiple_sessions_per_day_count_once(self):
        sessions = [
            datetime(2026, 3, 11, 7, 0),
            datetime(2026, 3, 11, 18, 30),
            datetime(2026, 3, 10, 17, 0),
        ]

        assert calculate_streak(sessions, today=TODAY) == 2

    def test_future_dates_ignored(self):
        assert calculate_streak(days_ago(-1, -2), today=TODAY) == 0
        assert calculate_streak(days_ago(-1, 0, 1), today=TODAY) == 2

    def test_accepts_datetime_today(self):
        assert calculate_streak(days_ago(0), today=datetime(2026, 3, 11, 23, 59)) == 1

    def test_idempotent_over_duplicates(self):
        sessions = days_ago(0, 1, 2)

        assert calculate_streak(sessions + sessions, today=TODAY) == calculate_streak(sessions, today=TODAY)

    def test_order_does_not_matter(self):
        assert calculate_streak(days_ago(2, 0, 1), today=TODAY) == 3


class TestWeeklyCounts:

    def test_bucketed_most_recent_first(self):
        counts = get_weekly_counts(days_ago(0, 3, 6, 7, 13, 20, 27), weeks=4, today=TODAY)

        assert counts == [3, 2, 1, 1]

    def test_old_sessions_dropped(self):
        assert get_weekly_counts(days_ago(28, 40), weeks=4, today=TODAY) == [0, 0, 0, 0]

    def test_every_session_counts(self):
        """Unlike the streak, two sessions on one day are two sessions"""
        assert get_weekly_counts(days_ago(0, 0), weeks=1, today=TODAY) == [2]

    def test_future_sessions_skipped(self):
        assert get_weekly_counts(days_ago(-3, 0), weeks=2, today=TODAY) == [1, 0]

    def test_zero_weeks(self):
        assert get_weekly_counts(days_ago(0), weeks=0, today=TODAY) == []

    def test_negative_weeks_rejected(self):
        with pytest.raises(InvalidInputError):
            get_weekly_counts([], weeks=-1, today=TODAY)

    def test_this_week_count(self):
        assert get_this_week_count(days_ago(0, 2, 6, 7), today=TODAY) == 3


class TestMessages:

    def test_milestones(self):
        assert get_streak_milestone(7) == STREAK_MILESTONES[7]
        assert get_streak_milestone(4) is None

    @pytest.mark.parametrize("streak", [0, 1, 2, 9])
    def test_message_always_present(self, streak):
        assert streak_message(streak)

    def test_summary(self):
        summary = summarize_consistency(days_ago(0, 1, 2, 9), weeks=2, today=TODAY)

        assert summary.streak_days == 3
        assert summary.weekly_counts == [3, 1]
        assert summary.this_week_count == 3
        assert summary.celebration == STREAK_MILESTONES[3]

    def test_summary_accepts_generator(self):
        summary = summarize_consistency((d for d in days_ago(0)), weeks=1, today=TODAY)

        assert summary.streak_days == 1
        assert summary.weekly_counts == [1]
