"""
Storage port for the training engine.

The engine itself is pure: the service layer loads records through a
TrainingStore, hands them to the engine as value objects and persists
whatever comes back. Any backend (SQL, in-memory for tests) implements this
interface. The engine never imports an implementation.

Implementation Requirements:
- Return core value objects (models.py), never ORM rows
- Enforce at most one active-or-paused enrollment per child
- Sessions are append-only
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from .models import ArcEnrollment, CheckIn, TrainingSession
from .session_mode import SessionModeResult


class TrainingStore(ABC):
    """Persistence interface used by the training service."""

    @abstractmethod
    def child_exists(self, child_id: UUID) -> bool:
        pass

    @abstractmethod
    def create_child(self, display_name: str, birth_year: Optional[int] = None) -> UUID:
        pass

    @abstractmethod
    def get_child_birth_year(self, child_id: UUID) -> Optional[int]:
        pass

    @abstractmethod
    def list_quality_ratings(self, child_id: UUID, since: datetime) -> List[int]:
        """Post-session quality ratings of check-ins at or after `since`."""
        pass

    @abstractmethod
    def get_check_in(self, child_id: UUID, on_date: date) -> Optional[CheckIn]:
        """
        Most recent check-in for a child on a calendar day.

        Returns:
            The latest check-in of that day, or None
        """
        pass

    @abstractmethod
    def get_check_in_by_id(self, child_id: UUID, check_in_id: UUID) -> Optional[CheckIn]:
        pass

    @abstractmethod
    def get_mode_result(self, check_in_id: UUID) -> Optional[SessionModeResult]:
        """Classification stored with a check-in."""
        pass

    @abstractmethod
    def get_current_enrollment(self, child_id: UUID) -> Optional[ArcEnrollment]:
        """The active or paused enrollment, or None."""
        pass

    @abstractmethod
    def list_enrollments(self, child_id: UUID) -> List[ArcEnrollment]:
        """All enrollments, oldest start first."""
        pass

    @abstractmethod
    def list_recent_sessions(self, child_id: UUID, limit: int) -> List[TrainingSession]:
        """Newest first, at most `limit`."""
        pass

    @abstractmethod
    def list_sessions_since(self, child_id: UUID, since: datetime) -> List[TrainingSession]:
        """Sessions logged at or after `since`, newest first."""
        pass

    @abstractmethod
    def list_session_dates(self, child_id: UUID, since: Optional[datetime] = None) -> List[datetime]:
        """Timestamps of sessions logged at or after `since` (all when None)."""
        pass

    @abstractmethod
    def save_check_in(self, check_in: CheckIn, result: SessionModeResult) -> CheckIn:
        """Persist a check-in with its classification. Returns it with id set."""
        pass

    @abstractmethod
    def update_check_in_quality(self, child_id: UUID, check_in_id: UUID, quality_rating: int) -> CheckIn:
        pass

    @abstractmethod
    def save_enrollment(self, enrollment: ArcEnrollment) -> ArcEnrollment:
        """
        Insert (id is None) or update an enrollment. Returns it with id set.

        Raises ArcTransitionError when saving would leave the child with a
        second active or paused enrollment.
        """
        pass

    @abstractmethod
    def save_session(self, session: TrainingSession) -> TrainingSession:
        pass
