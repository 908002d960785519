"""
SQL Training Store

SQLAlchemy implementation of the TrainingStore port. Maps ORM rows to the
engine's frozen value objects and back; no training logic lives here.

Usage:
    store = SqlTrainingStore(db)
    check_in = store.get_check_in(child_id, date.today())
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models
from core.logging import log_fields
from services.training_engine.constants import ArcId, ArcStatus, Mood, SessionMode, Soreness
from services.training_engine.errors import ArcTransitionError, InvariantViolation
from services.training_engine.models import ArcEnrollment, CheckIn, PauseInterval, TrainingSession
from services.training_engine.ports import TrainingStore
from services.training_engine.session_mode import SessionAdjustments, SessionModeResult

logger = logging.getLogger(__name__)

CURRENT_STATUSES = (ArcStatus.ACTIVE, ArcStatus.PAUSED)
ALREADY_ENROLLED_MESSAGE = "You already have an arc going. Finish that one first."


def _pauses_to_json(pauses) -> List[dict]:
    return [
        {
            "paused_at": p.paused_at.isoformat(),
            "resumed_at": p.resumed_at.isoformat() if p.resumed_at else None,
        }
        for p in pauses
    ]


def _pauses_from_json(raw) -> tuple:
    return tuple(
        PauseInterval(
            paused_at=datetime.fromisoformat(p["paused_at"]),
            resumed_at=datetime.fromisoformat(p["resumed_at"]) if p.get("resumed_at") else None,
        )
        for p in (raw or [])
    )


def _arc_id(value: Optional[str]):
    """Known ids become ArcId; unknown ones pass through for the engine to reject."""
    if value is None:
        return None
    try:
        return ArcId(value)
    except ValueError:
        return value


def check_in_from_row(row: models.CheckIn) -> CheckIn:
    return CheckIn(
        id=row.id,
        child_id=row.child_id,
        energy=row.energy,
        soreness=Soreness(row.soreness),
        focus=row.focus,
        mood=Mood(row.mood),
        time_available_minutes=row.time_available_minutes,
        pain_flag=row.pain_flag,
        created_at=row.created_at,
        quality_rating=row.quality_rating,
        completed=row.completed,
    )


def enrollment_from_row(row: models.ArcEnrollment) -> ArcEnrollment:
    return ArcEnrollment(
        id=row.id,
        child_id=row.child_id,
        arc_id=_arc_id(row.arc_id),
        status=ArcStatus(row.status),
        started_at=row.started_at,
        pauses=_pauses_from_json(row.pauses),
        pause_reason=row.pause_reason,
        completed_at=row.completed_at,
    )


def session_from_row(row: models.TrainingSession) -> TrainingSession:
    return TrainingSession(
        id=row.id,
        child_id=row.child_id,
        effort_level=row.effort_level,
        mood=Mood(row.mood),
        duration_minutes=row.duration_minutes,
        created_at=row.created_at,
        drill_id=row.drill_id,
        arc_id=_arc_id(row.arc_id),
        activity_type=row.activity_type,
        wins=tuple(row.wins or ()),
        focus_areas=tuple(row.focus_areas or ()),
    )


class SqlTrainingStore(TrainingStore):
    """TrainingStore backed by a SQLAlchemy session. Does not commit."""

    def __init__(self, db: Session):
        self.db = db

    def child_exists(self, child_id: UUID) -> bool:
        return self.db.get(models.Child, child_id) is not None

    def create_child(self, display_name: str, birth_year: Optional[int] = None) -> UUID:
        row = models.Child(display_name=display_name, birth_year=birth_year)
        self.db.add(row)
        self.db.flush()
        logger.info(f"Created child {row.id}")
        return row.id

    def get_child_birth_year(self, child_id: UUID) -> Optional[int]:
        row = self.db.get(models.Child, child_id)
        return row.birth_year if row else None

    # ------------------------------------------------------------------
    # Check-ins
    # ------------------------------------------------------------------

    def get_check_in(self, child_id: UUID, on_date: date) -> Optional[CheckIn]:
        start = datetime.combine(on_date, time.min)
        end = start + timedelta(days=1)
        row = (
            self.db.query(models.CheckIn)
            .filter(
                models.CheckIn.child_id == child_id,
                models.CheckIn.created_at >= start,
                models.CheckIn.created_at < end,
            )
            .order_by(models.CheckIn.created_at.desc())
            .first()
        )
        return check_in_from_row(row) if row else None

    def get_check_in_by_id(self, child_id: UUID, check_in_id: UUID) -> Optional[CheckIn]:
        row = self._check_in_row(child_id, check_in_id)
        return check_in_from_row(row) if row else None

    def get_mode_result(self, check_in_id: UUID) -> Optional[SessionModeResult]:
        row = self.db.get(models.CheckIn, check_in_id)
        if row is None:
            return None
        return SessionModeResult(
            mode=SessionMode(row.mode),
            explanation=row.mode_explanation,
            adjustments=SessionAdjustments(
                rep_multiplier=row.rep_multiplier,
                include_decision_work=row.include_decision_work,
                game_iq_emphasis=row.game_iq_emphasis,
                intense_drills_allowed=row.intense_drills_allowed,
                suggested_duration_minutes=row.suggested_duration_minutes,
            ),
            readiness_score=row.readiness_score,
        )

    def save_check_in(self, check_in: CheckIn, result: SessionModeResult) -> CheckIn:
        adjustments = result.adjustments
        row = models.CheckIn(
            child_id=check_in.child_id,
            created_at=check_in.created_at,
            energy=check_in.energy,
            soreness=Soreness(check_in.soreness).value,
            focus=check_in.focus,
            mood=Mood(check_in.mood).value,
            time_available_minutes=check_in.time_available_minutes,
            pain_flag=check_in.pain_flag,
            mode=result.mode.value,
            mode_explanation=result.explanation,
            rep_multiplier=adjustments.rep_multiplier,
            include_decision_work=adjustments.include_decision_work,
            game_iq_emphasis=adjustments.game_iq_emphasis,
            intense_drills_allowed=adjustments.intense_drills_allowed,
            suggested_duration_minutes=adjustments.suggested_duration_minutes,
            readiness_score=result.readiness_score,
        )
        self.db.add(row)
        self.db.flush()
        return check_in_from_row(row)

    def update_check_in_quality(self, child_id: UUID, check_in_id: UUID, quality_rating: int) -> CheckIn:
        row = self._check_in_row(child_id, check_in_id)
        if row is None:
            raise InvariantViolation(f"Check-in {check_in_id} does not exist for child {child_id}")
        row.quality_rating = quality_rating
        row.completed = True
        self.db.flush()
        return check_in_from_row(row)

    def list_quality_ratings(self, child_id: UUID, since: datetime) -> List[int]:
        rows = (
            self.db.query(models.CheckIn.quality_rating)
            .filter(
                models.CheckIn.child_id == child_id,
                models.CheckIn.created_at >= since,
                models.CheckIn.quality_rating.isnot(None),
            )
            .all()
        )
        return [r[0] for r in rows]

    def _check_in_row(self, child_id: UUID, check_in_id: UUID) -> Optional[models.CheckIn]:
        return (
            self.db.query(models.CheckIn)
            .filter(models.CheckIn.id == check_in_id, models.CheckIn.child_id == child_id)
            .first()
        )

    # ------------------------------------------------------------------
    # Enrollments
    # ------------------------------------------------------------------

    def get_current_enrollment(self, child_id: UUID) -> Optional[ArcEnrollment]:
        rows = (
            self.db.query(models.ArcEnrollment)
            .filter(
                models.ArcEnrollment.child_id == child_id,
                models.ArcEnrollment.status.in_([ArcStatus.ACTIVE.value, ArcStatus.PAUSED.value]),
            )
            .all()
        )
        if len(rows) > 1:
            raise InvariantViolation(f"Child {child_id} has {len(rows)} active or paused enrollments")
        return enrollment_from_row(rows[0]) if rows else None

    def list_enrollments(self, child_id: UUID) -> List[ArcEnrollment]:
        rows = (
            self.db.query(models.ArcEnrollment)
            .filter(models.ArcEnrollment.child_id == child_id)
            .order_by(models.ArcEnrollment.started_at.asc(), models.ArcEnrollment.created_at.asc())
            .all()
        )
        return [enrollment_from_row(r) for r in rows]

    def save_enrollment(self, enrollment: ArcEnrollment) -> ArcEnrollment:
        if enrollment.is_current:
            self._ensure_no_other_current(enrollment)

        try:
            with self.db.begin_nested():
                if enrollment.id is None:
                    row = models.ArcEnrollment(child_id=enrollment.child_id)
                    self.db.add(row)
                else:
                    row = self.db.get(models.ArcEnrollment, enrollment.id)
                    if row is None:
                        raise InvariantViolation(f"Enrollment {enrollment.id} does not exist")

                row.arc_id = ArcId(enrollment.arc_id).value
                row.status = enrollment.status.value
                row.started_at = enrollment.started_at
                row.pauses = _pauses_to_json(enrollment.pauses)
                row.pause_reason = enrollment.pause_reason
                row.completed_at = enrollment.completed_at
                self.db.flush()
        except IntegrityError as e:
            # Concurrent start lost the race on uq_arc_enrollment_current
            logger.warning(
                "Rejected second current enrollment",
                extra=log_fields(child_id=enrollment.child_id, arc_id=ArcId(enrollment.arc_id).value),
            )
            raise ArcTransitionError(ALREADY_ENROLLED_MESSAGE) from e
        return enrollment_from_row(row)

    def _ensure_no_other_current(self, enrollment: ArcEnrollment) -> None:
        query = self.db.query(models.ArcEnrollment.id).filter(
            models.ArcEnrollment.child_id == enrollment.child_id,
            models.ArcEnrollment.status.in_([s.value for s in CURRENT_STATUSES]),
        )
        if enrollment.id is not None:
            query = query.filter(models.ArcEnrollment.id != enrollment.id)
        if query.first() is not None:
            raise ArcTransitionError(ALREADY_ENROLLED_MESSAGE)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def list_recent_sessions(self, child_id: UUID, limit: int) -> List[TrainingSession]:
        rows = (
            self.db.query(models.TrainingSession)
            .filter(models.TrainingSession.child_id == child_id)
            .order_by(models.TrainingSession.created_at.desc())
            .limit(limit)
            .all()
        )
        return [session_from_row(r) for r in rows]

    def list_sessions_since(self, child_id: UUID, since: datetime) -> List[TrainingSession]:
        rows = (
            self.db.query(models.TrainingSession)
            .filter(
                models.TrainingSession.child_id == child_id,
                models.TrainingSession.created_at >= since,
            )
            .order_by(models.TrainingSession.created_at.desc())
            .all()
        )
        return [session_from_row(r) for r in rows]

    def list_session_dates(self, child_id: UUID, since: Optional[datetime] = None) -> List[datetime]:
        query = self.db.query(models.TrainingSession.created_at).filter(
            models.TrainingSession.child_id == child_id
        )
        if since is not None:
            query = query.filter(models.TrainingSession.created_at >= since)
        return [r[0] for r in query.order_by(models.TrainingSession.created_at.desc()).all()]

    def save_session(self, session: TrainingSession) -> TrainingSession:
        row = models.TrainingSession(
            child_id=session.child_id,
            created_at=session.created_at,
            drill_id=session.drill_id,
            arc_id=ArcId(session.arc_id).value if session.arc_id is not None else None,
            activity_type=session.activity_type,
            effort_level=session.effort_level,
            mood=Mood(session.mood).value,
            duration_minutes=session.duration_minutes,
            wins=list(session.wins),
            focus_areas=list(session.focus_areas),
        )
        self.db.add(row)
        self.db.flush()
        return session_from_row(row)
