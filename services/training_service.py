"""
Training Service

Orchestrates the pure training engine against a TrainingStore:
load records -> call the engine -> persist what changed.

The engine never reads the clock; this layer does (through `clock`, so tests
can pin "now"). Calendar days are the server's local days.

Usage:
    service = TrainingService(SqlTrainingStore(db))
    check_in, mode = service.record_check_in(child_id, energy=4, ...)
    plan = service.build_plan(child_id)
"""

from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple
from uuid import UUID
import logging

from core.config import settings
from core.exceptions import NotFoundError
from core.logging import log_fields
from services.text_filter import filter_tags, filter_text
from services.training_engine.arc_progression import (
    ArcProgress,
    ArcRecommendation,
    NextArcSuggestion,
    complete_enrollment,
    completed_arc_ids,
    pause_enrollment,
    recommend_arc,
    resume_enrollment,
    start_enrollment,
    suggest_next_arc,
    summarize_progress,
)
from services.training_engine.catalog import get_arc, get_drill
from services.training_engine.constants import (
    EFFORT_MAX,
    EFFORT_MIN,
    MAX_FOCUS_AREAS,
    MAX_TAG_LENGTH,
    MAX_WINS,
    QUALITY_RATING_MAX,
    QUALITY_RATING_MIN,
    ArcStatus,
    Mood,
    Soreness,
)
from services.training_engine.errors import ArcNotFoundError, ArcTransitionError, InvalidInputError
from services.training_engine.models import ArcEnrollment, CheckIn, TrainingSession
from services.training_engine.plan_builder import DailyPlan, build_today_plan
from services.training_engine.ports import TrainingStore
from services.training_engine.session_mode import SessionModeResult, classify
from services.training_engine.streaks import ConsistencySummary, summarize_consistency

logger = logging.getLogger(__name__)

RECOMMENDATION_LOOKBACK_DAYS = 14


def _int_in_range(value, low: int, high: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{field} must be an integer, got {value!r}", field=field)
    if not low <= value <= high:
        raise InvalidInputError(f"{field} must be between {low} and {high}, got {value}", field=field)
    return value


class TrainingService:
    """Use cases behind the child-facing training API."""

    def __init__(self, store: TrainingStore, clock: Callable[[], datetime] = datetime.now):
        """
        Args:
            store: Persistence port
            clock: Returns "now" (naive, server local time)
        """
        self.store = store
        self.clock = clock

    def _require_child(self, child_id: UUID) -> None:
        if not self.store.child_exists(child_id):
            raise NotFoundError("Child", str(child_id))

    # ===========================================
    # CHILDREN
    # ===========================================

    def create_child(self, display_name: str, birth_year: Optional[int] = None) -> UUID:
        name = filter_text(display_name, MAX_TAG_LENGTH)
        if not name:
            raise InvalidInputError("Display name is required", field="display_name")
        return self.store.create_child(name, birth_year)

    # ===========================================
    # CHECK-INS
    # ===========================================

    def record_check_in(
        self,
        child_id: UUID,
        energy: int,
        soreness: Soreness,
        focus: int,
        mood: Mood,
        time_available_minutes: int,
        pain_flag: bool = False,
    ) -> Tuple[CheckIn, SessionModeResult]:
        """Classify and persist a check-in. The result is stored with it."""
        self._require_child(child_id)
        check_in = CheckIn(
            child_id=child_id,
            energy=energy,
            soreness=soreness,
            focus=focus,
            mood=mood,
            time_available_minutes=time_available_minutes,
            pain_flag=pain_flag,
            created_at=self.clock(),
        )
        result = classify(check_in)
        saved = self.store.save_check_in(check_in, result)
        logger.info(
            f"Check-in {saved.id} recorded",
            extra=log_fields(child_id=child_id, mode=result.mode.value, readiness=result.readiness_score),
        )
        return saved, result

    def get_today_check_in(self, child_id: UUID) -> Optional[Tuple[CheckIn, SessionModeResult]]:
        self._require_child(child_id)
        check_in = self.store.get_check_in(child_id, self.clock().date())
        if check_in is None:
            return None
        return check_in, self.store.get_mode_result(check_in.id)

    def rate_check_in(self, child_id: UUID, check_in_id: UUID, quality_rating: int) -> CheckIn:
        """Post-session quality rating; the only amendment a check-in accepts."""
        self._require_child(child_id)
        _int_in_range(quality_rating, QUALITY_RATING_MIN, QUALITY_RATING_MAX, "quality_rating")
        if self.store.get_check_in_by_id(child_id, check_in_id) is None:
            raise NotFoundError("Check-in", str(check_in_id))
        return self.store.update_check_in_quality(child_id, check_in_id, quality_rating)

    # ===========================================
    # SESSIONS
    # ===========================================

    def log_session(
        self,
        child_id: UUID,
        effort_level: int,
        mood: Mood,
        duration_minutes: int,
        drill_id: Optional[str] = None,
        arc_id: Optional[str] = None,
        activity_type: str = "Training",
        wins: Iterable[str] = (),
        focus_areas: Iterable[str] = (),
    ) -> TrainingSession:
        """
        Validate, scrub and store a completed session, then re-check arc completion.

        Raises:
            InvalidInputError: effort/duration out of range, unknown drill or arc,
                too many wins or focus areas.
        """
        self._require_child(child_id)
        _int_in_range(effort_level, EFFORT_MIN, EFFORT_MAX, "effort_level")
        if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
            raise InvalidInputError(
                f"duration_minutes must be a positive integer, got {duration_minutes!r}",
                field="duration_minutes",
            )
        try:
            mood = Mood(mood)
        except ValueError:
            raise InvalidInputError(f"Unknown mood: {mood!r}", field="mood")
        if drill_id is not None and get_drill(drill_id) is None:
            raise InvalidInputError(f"Unknown drill: {drill_id}", field="drill_id")
        arc = None
        if arc_id is not None:
            try:
                arc = get_arc(arc_id)
            except ArcNotFoundError:
                raise InvalidInputError(f"Unknown arc: {arc_id}", field="arc_id")

        session = TrainingSession(
            child_id=child_id,
            effort_level=effort_level,
            mood=mood,
            duration_minutes=duration_minutes,
            created_at=self.clock(),
            drill_id=drill_id,
            arc_id=arc.id if arc else None,
            activity_type=filter_text(activity_type, MAX_TAG_LENGTH) or "Training",
            wins=tuple(filter_tags(wins, MAX_WINS, "wins")),
            focus_areas=tuple(filter_tags(focus_areas, MAX_FOCUS_AREAS, "focus_areas")),
        )
        saved = self.store.save_session(session)
        logger.info(f"Session {saved.id} logged for child {child_id} (drill={drill_id}, arc={saved.arc_id})")

        self.refresh_arc_status(child_id)
        return saved

    def list_sessions(self, child_id: UUID, limit: int = 20) -> List[TrainingSession]:
        self._require_child(child_id)
        return self.store.list_recent_sessions(child_id, limit)

    # ===========================================
    # ARCS
    # ===========================================

    def start_arc(self, child_id: UUID, arc_id: str) -> ArcEnrollment:
        self._require_child(child_id)
        self.refresh_arc_status(child_id)
        enrollment = start_enrollment(
            child_id,
            arc_id,
            now=self.clock(),
            existing=self.store.list_enrollments(child_id),
        )
        saved = self.store.save_enrollment(enrollment)
        logger.info(f"Child {child_id} started arc {saved.arc_id.value}")
        return saved

    def pause_arc(self, child_id: UUID, reason: Optional[str] = None) -> ArcEnrollment:
        self._require_child(child_id)
        current = self.refresh_arc_status(child_id)
        if current is None:
            raise ArcTransitionError("There's no arc running right now.")
        saved = self.store.save_enrollment(pause_enrollment(current, self.clock(), reason))
        logger.info(f"Child {child_id} paused arc {saved.arc_id.value} (reason={reason})")
        return saved

    def resume_arc(self, child_id: UUID) -> ArcEnrollment:
        self._require_child(child_id)
        current = self.store.get_current_enrollment(child_id)
        if current is None:
            raise ArcTransitionError("There's no paused arc to pick back up.")
        saved = self.store.save_enrollment(resume_enrollment(current, self.clock()))
        logger.info(f"Child {child_id} resumed arc {saved.arc_id.value}")
        return saved

    def refresh_arc_status(self, child_id: UUID) -> Optional[ArcEnrollment]:
        """
        Complete the current arc if it has earned it.

        Returns:
            The current (active or paused) enrollment after the check, or None
        """
        current = self.store.get_current_enrollment(child_id)
        if current is None or current.status != ArcStatus.ACTIVE:
            return current

        sessions = self.store.list_sessions_since(child_id, current.started_at)
        updated = complete_enrollment(current, sessions, self.clock())
        if updated is current:
            return current

        self.store.save_enrollment(updated)
        return None

    def get_current_arc(self, child_id: UUID) -> Optional[ArcEnrollment]:
        self._require_child(child_id)
        return self.refresh_arc_status(child_id)

    def get_arc_progress(self, child_id: UUID) -> Optional[ArcProgress]:
        """Progress of the current arc, or of the last one when none is running."""
        self._require_child(child_id)
        enrollment = self.refresh_arc_status(child_id)
        if enrollment is None:
            history = self.store.list_enrollments(child_id)
            if not history:
                return None
            enrollment = history[-1]

        sessions = []
        if enrollment.started_at is not None:
            sessions = self.store.list_sessions_since(child_id, enrollment.started_at)
        return summarize_progress(enrollment, sessions, self.clock())

    def suggest_next_arc(self, child_id: UUID) -> NextArcSuggestion:
        self._require_child(child_id)
        return suggest_next_arc(completed_arc_ids(self.store.list_enrollments(child_id)))

    def recommend_arc(self, child_id: UUID) -> ArcRecommendation:
        self._require_child(child_id)
        since = self.clock() - timedelta(days=RECOMMENDATION_LOOKBACK_DAYS)
        ratings = self.store.list_quality_ratings(child_id, since)
        return recommend_arc(
            has_current_arc=self.refresh_arc_status(child_id) is not None,
            sessions_last_14_days=len(self.store.list_session_dates(child_id, since)),
            completed_arc_ids=completed_arc_ids(self.store.list_enrollments(child_id)),
            avg_quality_rating=sum(ratings) / len(ratings) if ratings else None,
        )

    # ===========================================
    # PLAN & CONSISTENCY
    # ===========================================

    def build_plan(self, child_id: UUID) -> DailyPlan:
        """
        Today's plan.

        Raises:
            NoCheckInError: the child has not checked in today.
        """
        self._require_child(child_id)
        now = self.clock()
        check_in = self.store.get_check_in(child_id, now.date())
        enrollment = self.refresh_arc_status(child_id)
        sessions = self.store.list_sessions_since(
            child_id, now - timedelta(days=settings.PLAN_HISTORY_DAYS)
        )
        birth_year = self.store.get_child_birth_year(child_id)
        plan = build_today_plan(
            child_id,
            check_in,
            enrollment,
            sessions,
            as_of=now,
            recent_window=settings.RECENT_SESSION_WINDOW,
            session_dates=self.store.list_session_dates(child_id),
            child_age=now.year - birth_year if birth_year else None,
        )
        logger.debug(
            "Plan served",
            extra=log_fields(
                child_id=child_id,
                mode=plan.mode.value,
                arc_id=plan.arc_id.value if plan.arc_id else None,
                total_minutes=plan.total_minutes,
            ),
        )
        return plan

    def get_consistency(self, child_id: UUID) -> ConsistencySummary:
        self._require_child(child_id)
        return summarize_consistency(
            self.store.list_session_dates(child_id),
            weeks=settings.WEEKLY_COUNT_WEEKS,
            today=self.clock(),
        )
