"""
Session Mode Classifier

Maps a daily check-in to a session mode plus concrete training adjustments.

Rules (deterministic, no randomness, no ML):
    1. Safety override: pain or HIGH soreness -> RECOVERY. Evaluated first and
       short-circuits everything else, so nothing can escalate intensity when
       pain is flagged.
    2. Composite readiness = mean(energy, focus, mood score, soreness score).
    3. Sessions shorter than 20 minutes cap the composite at 3.5 (never PEAK).
    4. PEAK needs composite >= 4.0 AND energy >= 4 AND focus >= 4.
       NORMAL needs composite >= 2.5. Anything else is LOW_BATTERY.

Every explanation is supportive. There is no branch that tells a child they
did badly or should feel bad about resting.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from .constants import (
    LOW_BATTERY_MAX_MINUTES,
    MOOD_SCORES,
    Mood,
    NORMAL_SCORE_THRESHOLD,
    PEAK_MIN_ENERGY,
    PEAK_MIN_FOCUS,
    PEAK_SCORE_THRESHOLD,
    RECOVERY_MAX_MINUTES,
    REP_MULTIPLIERS,
    SCORE_MAX,
    SCORE_MIN,
    SHORT_SESSION_MINUTES,
    SHORT_SESSION_SCORE_CAP,
    SORENESS_SCORES,
    SessionMode,
    Soreness,
)
from .errors import InvalidInputError
from .models import CheckIn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionAdjustments:
    """How today's session is shaped by the mode."""
    rep_multiplier: float            # 1.0 = normal, 1.2 = more, 0.7 = less
    include_decision_work: bool
    game_iq_emphasis: bool
    intense_drills_allowed: bool
    suggested_duration_minutes: int


@dataclass(frozen=True)
class SessionModeResult:
    """Classifier output. Persisted next to its check-in, never patched."""
    mode: SessionMode
    explanation: str
    adjustments: SessionAdjustments
    readiness_score: float = 0.0     # time-adjusted composite (0.0 on override)


EXPLANATIONS: Dict[str, str] = {
    "pain": "Let's take it easy today. If pain continues, check with a parent or coach.",
    "soreness": "Your body needs some rest. We'll focus on Game IQ and light touches.",
    SessionMode.PEAK.value: "You're feeling great! Let's push a bit harder and add some decision drills.",
    SessionMode.NORMAL.value: "Solid session ahead. Let's work on the fundamentals.",
    SessionMode.LOW_BATTERY.value: "Lower energy today? No problem. We'll keep it short and focus on Game IQ.",
}

# Words that must never appear in a mode explanation.
SHAMING_WORDS: Tuple[str, ...] = (
    "lazy", "weak", "failure", "failed", "quit", "quitter", "disappointing",
    "disappointed", "should have", "not good enough", "excuse", "pathetic",
    "slacking",
)

MODE_DISPLAY: Dict[SessionMode, Dict[str, str]] = {
    SessionMode.PEAK: {
        "label": "Peak Day",
        "icon": "🚀",
        "description": "High intensity, extra drills",
    },
    SessionMode.NORMAL: {
        "label": "Normal Day",
        "icon": "⚽",
        "description": "Balanced training session",
    },
    SessionMode.LOW_BATTERY: {
        "label": "Low Battery",
        "icon": "🔋",
        "description": "Shorter, Game IQ focus",
    },
    SessionMode.RECOVERY: {
        "label": "Recovery",
        "icon": "🧘",
        "description": "Light touches, mental work",
    },
}

MOOD_DISPLAY: Dict[Mood, Dict[str, str]] = {
    Mood.EXCITED: {"emoji": "😄", "label": "Excited"},
    Mood.FOCUSED: {"emoji": "🎯", "label": "Focused"},
    Mood.OKAY: {"emoji": "😊", "label": "Okay"},
    Mood.TIRED: {"emoji": "😴", "label": "Tired"},
    Mood.STRESSED: {"emoji": "😰", "label": "Stressed"},
}

SORENESS_LABELS: Dict[Soreness, str] = {
    Soreness.NONE: "None",
    Soreness.LIGHT: "Light",
    Soreness.MEDIUM: "Medium",
    Soreness.HIGH: "High",
}


def validate_check_in(check_in: CheckIn) -> None:
    """Reject out-of-range fields. Never clamps."""
    for name in ("energy", "focus"):
        value = getattr(check_in, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError(f"{name} must be an integer, got {value!r}", field=name)
        if not SCORE_MIN <= value <= SCORE_MAX:
            raise InvalidInputError(
                f"{name} must be between {SCORE_MIN} and {SCORE_MAX}, got {value}",
                field=name,
            )

    minutes = check_in.time_available_minutes
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise InvalidInputError(
            f"time_available_minutes must be a positive integer, got {minutes!r}",
            field="time_available_minutes",
        )

    try:
        Soreness(check_in.soreness)
    except ValueError:
        raise InvalidInputError(f"Unknown soreness: {check_in.soreness!r}", field="soreness")
    try:
        Mood(check_in.mood)
    except ValueError:
        raise InvalidInputError(f"Unknown mood: {check_in.mood!r}", field="mood")


def composite_score(check_in: CheckIn) -> float:
    """Mean of the four 1-5 sub-scores, before the time cap."""
    mood_score = MOOD_SCORES[Mood(check_in.mood)]
    soreness_score = SORENESS_SCORES[Soreness(check_in.soreness)]
    return (check_in.energy + check_in.focus + mood_score + soreness_score) / 4


def classify(check_in: CheckIn) -> SessionModeResult:
    """
    Classify a check-in into a session mode.

    Raises:
        InvalidInputError: energy/focus outside [1, 5] or non-positive time.
    """
    validate_check_in(check_in)
    minutes = check_in.time_available_minutes

    # Safety first: pain or high soreness always means recovery
    if check_in.pain_flag or Soreness(check_in.soreness) == Soreness.HIGH:
        reason = "pain" if check_in.pain_flag else "soreness"
        logger.info(f"Check-in for {check_in.child_id}: RECOVERY override ({reason})")
        return SessionModeResult(
            mode=SessionMode.RECOVERY,
            explanation=EXPLANATIONS[reason],
            adjustments=SessionAdjustments(
                rep_multiplier=REP_MULTIPLIERS[SessionMode.RECOVERY],
                include_decision_work=True,  # mental work is fine
                game_iq_emphasis=True,
                intense_drills_allowed=False,
                suggested_duration_minutes=min(minutes, RECOVERY_MAX_MINUTES),
            ),
        )

    score = composite_score(check_in)
    if minutes < SHORT_SESSION_MINUTES:
        score = min(score, SHORT_SESSION_SCORE_CAP)

    if (
        score >= PEAK_SCORE_THRESHOLD
        and check_in.energy >= PEAK_MIN_ENERGY
        and check_in.focus >= PEAK_MIN_FOCUS
    ):
        mode = SessionMode.PEAK
        adjustments = SessionAdjustments(
            rep_multiplier=REP_MULTIPLIERS[mode],
            include_decision_work=True,
            game_iq_emphasis=False,
            intense_drills_allowed=True,
            suggested_duration_minutes=minutes,
        )
    elif score >= NORMAL_SCORE_THRESHOLD:
        mode = SessionMode.NORMAL
        adjustments = SessionAdjustments(
            rep_multiplier=REP_MULTIPLIERS[mode],
            include_decision_work=False,
            game_iq_emphasis=False,
            intense_drills_allowed=True,
            suggested_duration_minutes=minutes,
        )
    else:
        mode = SessionMode.LOW_BATTERY
        adjustments = SessionAdjustments(
            rep_multiplier=REP_MULTIPLIERS[mode],
            include_decision_work=True,
            game_iq_emphasis=True,
            intense_drills_allowed=False,
            suggested_duration_minutes=min(minutes, LOW_BATTERY_MAX_MINUTES),
        )

    logger.info(
        f"Check-in for {check_in.child_id}: mode={mode.value}, "
        f"score={score:.2f}, minutes={minutes}"
    )
    return SessionModeResult(
        mode=mode,
        explanation=EXPLANATIONS[mode.value],
        adjustments=adjustments,
        readiness_score=round(score, 2),
    )


def contains_shaming_language(text: str) -> bool:
    """True if any shaming word appears in the text (case-insensitive)."""
    lowered = text.lower()
    return any(word in lowered for word in SHAMING_WORDS)


def get_session_mode_display(mode: SessionMode) -> Dict[str, str]:
    """Label, icon and short description for a mode."""
    return dict(MODE_DISPLAY[SessionMode(mode)])


def get_mood_display(mood: Mood) -> Dict[str, str]:
    return dict(MOOD_DISPLAY[Mood(mood)])


def get_soreness_display(soreness: Soreness) -> str:
    return SORENESS_LABELS[Soreness(soreness)]
