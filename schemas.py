from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, date
from uuid import UUID
from typing import Optional, List

from services.training_engine.constants import ArcId, ArcStatus, IntensityBias, Mood, PlanItemKind, SessionMode, Soreness


# Range checks on ints are done by the training engine so errors name the
# field the same way for API and internal callers.


class ChildCreate(BaseModel):
    display_name: str
    birth_year: Optional[int] = None


class ChildResponse(BaseModel):
    id: UUID


class CheckInCreate(BaseModel):
    energy: int  # 1-5
    soreness: Soreness
    focus: int  # 1-5
    mood: Mood
    time_available_minutes: int  # 10 / 20 / 30
    pain_flag: bool = False


class SessionAdjustmentsResponse(BaseModel):
    rep_multiplier: float
    include_decision_work: bool
    game_iq_emphasis: bool
    intense_drills_allowed: bool
    suggested_duration_minutes: int

    model_config = ConfigDict(from_attributes=True)


class SessionModeResponse(BaseModel):
    mode: SessionMode
    explanation: str
    adjustments: SessionAdjustmentsResponse
    readiness_score: float = 0.0
    label: Optional[str] = None
    icon: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CheckInResponse(BaseModel):
    id: UUID
    child_id: UUID
    created_at: datetime
    energy: int
    soreness: Soreness
    focus: int
    mood: Mood
    time_available_minutes: int
    pain_flag: bool
    quality_rating: Optional[int] = None
    completed: bool = False
    session_mode: Optional[SessionModeResponse] = None

    model_config = ConfigDict(from_attributes=True)


class QualityRatingUpdate(BaseModel):
    quality_rating: int  # 1-5


class SessionCreate(BaseModel):
    effort_level: int  # 1-10
    mood: Mood
    duration_minutes: int
    drill_id: Optional[str] = None
    arc_id: Optional[str] = None
    activity_type: str = "Training"
    wins: List[str] = Field(default_factory=list)
    focus_areas: List[str] = Field(default_factory=list)


class SessionResponse(BaseModel):
    id: UUID
    child_id: UUID
    created_at: datetime
    effort_level: int
    mood: Mood
    duration_minutes: int
    drill_id: Optional[str] = None
    arc_id: Optional[ArcId] = None
    activity_type: str
    wins: List[str]
    focus_areas: List[str]

    model_config = ConfigDict(from_attributes=True)


class ConsistencyResponse(BaseModel):
    streak_days: int
    weekly_counts: List[int]  # most recent week first
    this_week_count: int
    message: str
    celebration: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ArcStartRequest(BaseModel):
    arc_id: str


class ArcPauseRequest(BaseModel):
    reason: Optional[str] = None  # busy | break | injury | travel | other


class EnrollmentResponse(BaseModel):
    id: UUID
    child_id: UUID
    arc_id: ArcId
    status: ArcStatus
    started_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    resumed_at: Optional[datetime] = None
    pause_reason: Optional[str] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ArcProgressResponse(BaseModel):
    enrollment_id: Optional[UUID] = None
    arc_id: ArcId
    status: ArcStatus
    day_index: int
    progress_percent: int
    day_label: str
    message: str
    completion_message: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class NextArcResponse(BaseModel):
    arc_id: Optional[ArcId] = None
    all_complete: bool
    recommend: bool = False
    reason: str = ""


class ArcSummaryResponse(BaseModel):
    id: ArcId
    title: str
    subtitle: str
    icon: str
    color: str
    recommended_duration_days: int
    drill_ids: List[str]
    game_iq_ids: List[str]
    player_description: str
    parent_explanation: str
    intensity_bias: IntensityBias

    model_config = ConfigDict(from_attributes=True)


class PlanItemResponse(BaseModel):
    kind: PlanItemKind
    content_id: str
    title: str
    track: str
    from_arc: bool
    base_minutes: int
    target_minutes: int
    base_reps: Optional[int] = None
    target_reps: Optional[int] = None
    intensity: Optional[str] = None
    substituted_for: Optional[str] = None
    swapped_for: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class DailyPlanResponse(BaseModel):
    child_id: UUID
    generated_for: date
    mode: SessionMode
    mode_explanation: str
    adjustments: SessionAdjustmentsResponse
    items: List[PlanItemResponse]
    total_minutes: int
    explanation_copy: str
    streak_days: int
    coach_note: str
    arc_id: Optional[ArcId] = None
    arc_day_index: Optional[int] = None
    arc_day_label: Optional[str] = None
    arc_progress_percent: Optional[int] = None
    recovery_activity: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
