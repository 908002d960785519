# Youth Training Engine
#
# Pure decision core for daily youth soccer training.
#
# Architecture:
# - Session-mode classifier: daily check-in -> mode + adjustments
# - Static arc catalog: multi-day themed programs, drills, Game IQ modules
# - Arc progression: day index, pause fairness, completion
# - Daily plan builder: "what do I do today"
# - Streak calculator: consistency over perfection
#
# No I/O here. Records come in through the TrainingStore port.

from .constants import ArcId, ArcStatus, DrillTrack, GameIQTrack, Mood, SessionMode, Soreness
from .errors import (
    ArcNotFoundError,
    ArcTransitionError,
    CatalogError,
    InvalidInputError,
    InvariantViolation,
    NoCheckInError,
    TrainingEngineError,
)
from .models import ArcEnrollment, CheckIn, PauseInterval, TrainingSession
from .session_mode import SessionAdjustments, SessionModeResult, classify
from .catalog import Arc, Drill, GameIQModule, get_arc, get_drill, get_game_iq_module, list_arcs_in_default_order
from .arc_progression import (
    compute_day_index,
    compute_progress_percent,
    compute_status,
    suggest_next_arc,
)
from .plan_builder import DailyPlan, PlanItem, build_today_plan
from .streaks import calculate_streak, get_weekly_counts
from .ports import TrainingStore

__all__ = [
    # Constants
    'ArcId',
    'ArcStatus',
    'DrillTrack',
    'GameIQTrack',
    'Mood',
    'SessionMode',
    'Soreness',

    # Errors
    'TrainingEngineError',
    'InvalidInputError',
    'NoCheckInError',
    'InvariantViolation',
    'ArcNotFoundError',
    'ArcTransitionError',
    'CatalogError',

    # Records
    'CheckIn',
    'ArcEnrollment',
    'PauseInterval',
    'TrainingSession',

    # Classifier
    'SessionAdjustments',
    'SessionModeResult',
    'classify',

    # Catalog
    'Arc',
    'Drill',
    'GameIQModule',
    'get_arc',
    'get_drill',
    'get_game_iq_module',
    'list_arcs_in_default_order',

    # Progression
    'compute_day_index',
    'compute_progress_percent',
    'compute_status',
    'suggest_next_arc',

    # Plan
    'DailyPlan',
    'PlanItem',
    'build_today_plan',

    # Streaks
    'calculate_streak',
    'get_weekly_counts',

    # Port
    'TrainingStore',
]
