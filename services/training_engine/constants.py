"""
Constants for the training engine.

Closed sets (modes, moods, arc ids, statuses) are str-valued Enums so they
serialize cleanly into the store and API while still being exhaustively
matchable in code. Scoring tables are product-tuned; keep them as written.
"""

from enum import Enum
from typing import Dict


class Soreness(str, Enum):
    """Self-reported muscle soreness."""
    NONE = "NONE"
    LIGHT = "LIGHT"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Mood(str, Enum):
    """Mood picked on the check-in (and again when logging a session)."""
    EXCITED = "EXCITED"
    FOCUSED = "FOCUSED"
    OKAY = "OKAY"
    TIRED = "TIRED"
    STRESSED = "STRESSED"


class SessionMode(str, Enum):
    """Adaptive intensity classification for the day."""
    PEAK = "PEAK"
    NORMAL = "NORMAL"
    LOW_BATTERY = "LOW_BATTERY"
    RECOVERY = "RECOVERY"


class ArcId(str, Enum):
    """Stable keys of the arc catalog."""
    VISION = "vision"
    TEMPO = "tempo"
    DECISION_CHAIN = "decision_chain"


class ArcStatus(str, Enum):
    """Lifecycle of a child's enrollment in an arc."""
    INACTIVE = "inactive"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class IntensityBias(str, Enum):
    PEAK = "peak"
    NORMAL = "normal"
    LIGHT = "light"


class DrillTrack(str, Enum):
    """Physical/skill drill categories."""
    SCANNING = "scanning"
    DECISION_CHAIN = "decision_chain"
    TEMPO = "tempo"
    FIRST_TOUCH = "first_touch"


class DrillIntensity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class GameIQTrack(str, Enum):
    """Focus tracks for Game IQ (mental/tactical) modules."""
    VISION = "vision"
    TEMPO = "tempo"
    DECISION_MAKING = "decision_making"
    POSITIONING = "positioning"


class PlanItemKind(str, Enum):
    DRILL = "drill"
    GAME_IQ = "game_iq"


# Ordering used by the monotonicity guarantee: RECOVERY < LOW_BATTERY < NORMAL < PEAK
MODE_RANK: Dict[SessionMode, int] = {
    SessionMode.RECOVERY: 0,
    SessionMode.LOW_BATTERY: 1,
    SessionMode.NORMAL: 2,
    SessionMode.PEAK: 3,
}

MOOD_SCORES: Dict[Mood, int] = {
    Mood.EXCITED: 5,
    Mood.FOCUSED: 4,
    Mood.OKAY: 3,
    Mood.TIRED: 2,
    Mood.STRESSED: 1,
}

# Inverted: more soreness = lower score. LIGHT -> MEDIUM drops by 2, not 1.
SORENESS_SCORES: Dict[Soreness, int] = {
    Soreness.NONE: 5,
    Soreness.LIGHT: 4,
    Soreness.MEDIUM: 2,
    Soreness.HIGH: 1,
}

# Check-in bounds
SCORE_MIN = 1
SCORE_MAX = 5
TIME_OPTIONS_MINUTES = (10, 20, 30)

# Classifier thresholds
SHORT_SESSION_MINUTES = 20       # below this, the composite is capped
SHORT_SESSION_SCORE_CAP = 3.5
PEAK_SCORE_THRESHOLD = 4.0
PEAK_MIN_ENERGY = 4
PEAK_MIN_FOCUS = 4
NORMAL_SCORE_THRESHOLD = 2.5

REP_MULTIPLIERS: Dict[SessionMode, float] = {
    SessionMode.PEAK: 1.2,
    SessionMode.NORMAL: 1.0,
    SessionMode.LOW_BATTERY: 0.7,
    SessionMode.RECOVERY: 0.5,
}

RECOVERY_MAX_MINUTES = 15
LOW_BATTERY_MAX_MINUTES = 20

# Training session logging bounds
EFFORT_MIN = 1
EFFORT_MAX = 10
MAX_WINS = 3
MAX_FOCUS_AREAS = 3
MAX_TAG_LENGTH = 40
MAX_FREE_TEXT_LENGTH = 200
QUALITY_RATING_MIN = 1
QUALITY_RATING_MAX = 5

# Plan builder
RECENT_SESSION_WINDOW = 5        # last N sessions inspected for variety
VARIETY_LOOKBACK_DAYS = 3        # calendar days ending today
VARIETY_REPEAT_THRESHOLD = 2     # same drill on >= this many of those days
MIN_FILL_MINUTES = 1

# Arc suggestions
LOW_ACTIVITY_SESSIONS_14D = 3
LOW_QUALITY_RATING = 3.0
