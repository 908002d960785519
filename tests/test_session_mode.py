"""
Tests for the Session-Mode Classifier

Covers the safety override, composite scoring, the short-session cap,
the compound PEAK gate, input validation and supportive tone.
"""
import itertools

import pytest

from conftest import make_check_in
from services.training_engine.constants import MODE_RANK, Mood, SessionMode, Soreness
from services.training_engine.errors import InvalidInputError
from services.training_engine.session_mode import (
    EXPLANATIONS,
    SHAMING_WORDS,
    classify,
    composite_score,
    contains_shaming_language,
    get_mood_display,
    get_session_mode_display,
    get_soreness_display,
)


class TestScenarios:
    """Reference check-ins and their expected modes"""

    def test_great_day_with_full_time_is_peak(self, child_id):
        result = classify(make_check_in(
            child_id, energy=5, soreness=Soreness.NONE, focus=5, mood=Mood.EXCITED,
            time_available_minutes=30,
        ))

        assert result.mode == SessionMode.PEAK
        assert result.adjustments.rep_multiplier == 1.2
        assert result.adjustments.suggested_duration_minutes == 30
        assert result.adjustments.include_decision_work is True
        assert result.adjustments.intense_drills_allowed is True

    def test_average_day_with_ten_minutes_is_normal(self, child_id):
        """Composite 3.5 is capped at 3.5 and lands in NORMAL"""
        result = classify(make_check_in(
            child_id, energy=3, soreness=Soreness.NONE, focus=3, mood=Mood.OKAY,
            time_available_minutes=10,
        ))

        assert result.mode == SessionMode.NORMAL
        assert result.adjustments.rep_multiplier == 1.0
        assert result.adjustments.include_decision_work is False
        assert result.adjustments.suggested_duration_minutes == 10

    def test_high_soreness_beats_high_energy(self, child_id):
        result = classify(make_check_in(
            child_id, energy=4, soreness=Soreness.HIGH, focus=4, mood=Mood.FOCUSED,
            time_available_minutes=30,
        ))

        assert result.mode == SessionMode.RECOVERY
        assert result.explanation == EXPLANATIONS["soreness"]

    def test_low_readiness_is_low_battery(self, child_id):
        result = classify(make_check_in(
            child_id, energy=1, soreness=Soreness.MEDIUM, focus=2, mood=Mood.TIRED,
            time_available_minutes=30,
        ))

        assert result.mode == SessionMode.LOW_BATTERY
        assert result.adjustments.rep_multiplier == 0.7
        assert result.adjustments.game_iq_emphasis is True
        assert result.adjustments.intense_drills_allowed is False
        assert result.adjustments.suggested_duration_minutes == 20

    def test_low_battery_keeps_shorter_time(self, child_id):
        result = classify(make_check_in(
            child_id, energy=1, focus=1, mood=Mood.STRESSED, soreness=Soreness.MEDIUM,
            time_available_minutes=10,
        ))

        assert result.mode == SessionMode.LOW_BATTERY
        assert result.adjustments.suggested_duration_minutes == 10


class TestSafetyOverride:
    """Pain or high soreness always means recovery"""

    @pytest.mark.parametrize("energy", [1, 3, 5])
    @pytest.mark.parametrize("focus", [1, 3, 5])
    @pytest.mark.parametrize("mood", list(Mood))
    def test_pain_always_recovery(self, child_id, energy, focus, mood):
        result = classify(make_check_in(
            child_id, energy=energy, focus=focus, mood=mood, pain_flag=True,
        ))

        assert result.mode == SessionMode.RECOVERY
        assert result.adjustments.intense_drills_allowed is False
        assert result.adjustments.rep_multiplier == 0.5

    @pytest.mark.parametrize("minutes", [10, 20, 30, 60])
    def test_recovery_duration_capped_at_15(self, child_id, minutes):
        result = classify(make_check_in(child_id, soreness=Soreness.HIGH, time_available_minutes=minutes))

        assert result.adjustments.suggested_duration_minutes == min(minutes, 15)

    def test_recovery_keeps_mental_work(self, child_id):
        result = classify(make_check_in(child_id, pain_flag=True))

        assert result.adjustments.include_decision_work is True
        assert result.adjustments.game_iq_emphasis is True

    def test_pain_and_soreness_explanations_differ(self, child_id):
        pain = classify(make_check_in(child_id, pain_flag=True))
        sore = classify(make_check_in(child_id, soreness=Soreness.HIGH))

        assert pain.explanation != sore.explanation
        assert "parent or coach" in pain.explanation

    def test_pain_wins_over_soreness_explanation(self, child_id):
        result = classify(make_check_in(child_id, pain_flag=True, soreness=Soreness.HIGH))

        assert result.explanation == EXPLANATIONS["pain"]


class TestTimeGate:
    """Short sessions are never PEAK"""

    @pytest.mark.parametrize("minutes", [1, 5, 10, 15, 19])
    def test_short_session_never_peak(self, child_id, minutes):
        result = classify(make_check_in(
            child_id, energy=5, focus=5, mood=Mood.EXCITED, soreness=Soreness.NONE,
            time_available_minutes=minutes,
        ))

        assert result.mode != SessionMode.PEAK
        assert result.readiness_score <= 3.5

    def test_twenty_minutes_can_be_peak(self, child_id):
        result = classify(make_check_in(
            child_id, energy=5, focus=5, mood=Mood.EXCITED, time_available_minutes=20,
        ))

        assert result.mode == SessionMode.PEAK


class TestPeakGate:
    """PEAK needs the composite AND raw energy/focus"""

    def test_high_composite_with_low_energy_is_normal(self, child_id):
        # (3 + 5 + 5 + 5) / 4 = 4.5 but energy < 4
        result = classify(make_check_in(
            child_id, energy=3, focus=5, mood=Mood.EXCITED, soreness=Soreness.NONE,
        ))

        assert result.mode == SessionMode.NORMAL

    def test_high_composite_with_low_focus_is_normal(self, child_id):
        result = classify(make_check_in(
            child_id, energy=5, focus=3, mood=Mood.EXCITED, soreness=Soreness.NONE,
        ))

        assert result.mode == SessionMode.NORMAL

    def test_composite_exactly_four_is_peak(self, child_id):
        # (4 + 4 + 3 + 5) / 4 = 4.0
        check_in = make_check_in(child_id, energy=4, focus=4, mood=Mood.OKAY, soreness=Soreness.NONE)

        assert composite_score(check_in) == 4.0
        assert classify(check_in).mode == SessionMode.PEAK

    def test_composite_exactly_two_and_half_is_normal(self, child_id):
        # (2 + 2 + 4 + 2) / 4 = 2.5
        check_in = make_check_in(child_id, energy=2, focus=2, mood=Mood.FOCUSED, soreness=Soreness.MEDIUM)

        assert composite_score(check_in) == 2.5
        assert classify(check_in).mode == SessionMode.NORMAL

    def test_medium_soreness_drops_two_points(self, child_id):
        light = composite_score(make_check_in(child_id, soreness=Soreness.LIGHT))
        medium = composite_score(make_check_in(child_id, soreness=Soreness.MEDIUM))

        assert light - medium == pytest.approx(0.5)


class TestMonotonicity:
    """More energy and focus never lowers the mode"""

    @pytest.mark.parametrize("mood", list(Mood))
    @pytest.mark.parametrize("soreness", [Soreness.NONE, Soreness.LIGHT, Soreness.MEDIUM])
    @pytest.mark.parametrize("minutes", [10, 30])
    def test_rank_never_decreases(self, child_id, mood, soreness, minutes):
        for energy, focus in itertools.product(range(1, 6), range(1, 6)):
            base = classify(make_check_in(
                child_id, energy=energy, focus=focus, mood=mood, soreness=soreness,
                time_available_minutes=minutes,
            ))
            for d_energy, d_focus in ((1, 0), (0, 1), (1, 1)):
                if energy + d_energy > 5 or focus + d_focus > 5:
                    continue
                higher = classify(make_check_in(
                    child_id, energy=energy + d_energy, focus=focus + d_focus, mood=mood,
                    soreness=soreness, time_available_minutes=minutes,
                ))
                assert MODE_RANK[higher.mode] >= MODE_RANK[base.mode]


class TestValidation:
    """Out-of-range input is rejected, never clamped"""

    @pytest.mark.parametrize("energy", [0, 6, -1])
    def test_energy_out_of_range(self, child_id, energy):
        with pytest.raises(InvalidInputError) as exc_info:
            classify(make_check_in(child_id, energy=energy))
        assert exc_info.value.field == "energy"

    @pytest.mark.parametrize("focus", [0, 6])
    def test_focus_out_of_range(self, child_id, focus):
        with pytest.raises(InvalidInputError) as exc_info:
            classify(make_check_in(child_id, focus=focus))
        assert exc_info.value.field == "focus"

    @pytest.mark.parametrize("minutes", [0, -10])
    def test_non_positive_time(self, child_id, minutes):
        with pytest.raises(InvalidInputError) as exc_info:
            classify(make_check_in(child_id, time_available_minutes=minutes))
        assert exc_info.value.field == "time_available_minutes"

    def test_validation_runs_before_pain_override(self, child_id):
        with pytest.raises(InvalidInputError):
            classify(make_check_in(child_id, energy=9, pain_flag=True))

    def test_bool_is_not_a_score(self, child_id):
        with pytest.raises(InvalidInputError):
            classify(make_check_in(child_id, energy=True))

    def test_unknown_mood(self, child_id):
        with pytest.raises(InvalidInputError) as exc_info:
            classify(make_check_in(child_id, mood="GRUMPY"))
        assert exc_info.value.field == "mood"


class TestTone:
    """Every explanation is supportive"""

    def test_no_explanation_uses_shaming_words(self):
        for text in EXPLANATIONS.values():
            assert not contains_shaming_language(text), text

    def test_every_branch_checked(self, child_id):
        check_ins = [
            make_check_in(child_id, pain_flag=True),
            make_check_in(child_id, soreness=Soreness.HIGH),
            make_check_in(child_id, energy=5, focus=5, mood=Mood.EXCITED),
            make_check_in(child_id),
            make_check_in(child_id, energy=1, focus=1, mood=Mood.STRESSED, soreness=Soreness.MEDIUM),
        ]
        modes = set()
        for check_in in check_ins:
            result = classify(check_in)
            modes.add(result.mode)
            assert not contains_shaming_language(result.explanation)

        assert modes == set(SessionMode)

    def test_detector_catches_banned_words(self):
        assert contains_shaming_language("Don't be LAZY")
        assert all(contains_shaming_language(word) for word in SHAMING_WORDS)


class TestDeterminism:

    def test_same_input_same_output(self, child_id):
        check_in = make_check_in(child_id, energy=4, focus=2, mood=Mood.TIRED)

        assert classify(check_in) == classify(check_in)


class TestDisplay:

    def test_mode_display(self):
        assert get_session_mode_display(SessionMode.LOW_BATTERY)["label"] == "Low Battery"
        assert get_session_mode_display("RECOVERY")["icon"] == "🧘"

    def test_mood_and_soreness_display(self):
        assert get_mood_display(Mood.FOCUSED)["label"] == "Focused"
        assert get_soreness_display(Soreness.MEDIUM) == "Medium"
