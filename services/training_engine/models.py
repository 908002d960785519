"""
Input records for the training engine.

These are plain value objects handed to the pure core by the service layer.
The core never loads them itself; the store adapter maps ORM rows into them.
All of them are frozen: a check-in, an enrollment snapshot or a logged session
is never patched in place, transitions return a new record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from .constants import ArcId, ArcStatus, Mood, Soreness


@dataclass(frozen=True)
class CheckIn:
    """A child's self-report for one day."""
    child_id: UUID
    energy: int                      # 1-5
    soreness: Soreness
    focus: int                       # 1-5
    mood: Mood
    time_available_minutes: int      # 10 / 20 / 30 in the product
    pain_flag: bool = False
    created_at: Optional[datetime] = None
    id: Optional[UUID] = None
    quality_rating: Optional[int] = None   # only post-creation amendment
    completed: bool = False


@dataclass(frozen=True)
class PauseInterval:
    """One pause of an enrollment. An open interval has no resumed_at."""
    paused_at: datetime
    resumed_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.resumed_at is None


@dataclass(frozen=True)
class ArcEnrollment:
    """A child's relationship to one arc instance."""
    child_id: UUID
    arc_id: ArcId
    status: ArcStatus
    started_at: Optional[datetime] = None
    id: Optional[UUID] = None
    pauses: Tuple[PauseInterval, ...] = ()
    pause_reason: Optional[str] = None
    completed_at: Optional[datetime] = None

    @property
    def paused_at(self) -> Optional[datetime]:
        """Start of the most recent pause."""
        return self.pauses[-1].paused_at if self.pauses else None

    @property
    def resumed_at(self) -> Optional[datetime]:
        """End of the most recent pause (None while still paused)."""
        return self.pauses[-1].resumed_at if self.pauses else None

    @property
    def is_current(self) -> bool:
        """Active or paused; at most one per child."""
        return self.status in (ArcStatus.ACTIVE, ArcStatus.PAUSED)


@dataclass(frozen=True)
class TrainingSession:
    """A logged, completed activity."""
    child_id: UUID
    effort_level: int                # 1-10 RPE-like
    mood: Mood
    duration_minutes: int
    created_at: datetime
    id: Optional[UUID] = None
    drill_id: Optional[str] = None
    arc_id: Optional[ArcId] = None
    activity_type: str = "Training"
    wins: Tuple[str, ...] = field(default_factory=tuple)
    focus_areas: Tuple[str, ...] = field(default_factory=tuple)
