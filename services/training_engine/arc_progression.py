"""
Arc Progression Tracker

Computes where a child is inside an arc and moves enrollments through their
lifecycle:

    inactive -> active -> paused <-> active -> completed

Principles:
    - Day index counts calendar days since the start, minus every paused day.
      Pausing never advances the arc.
    - Completion needs engagement, not just elapsed time: the last day must be
      reached AND the child must have logged a session touching the arc's
      content on or after that day.
    - Nothing leaves `completed`. Doing an arc again is a new enrollment.
    - Only one active-or-paused enrollment per child. The store enforces it;
      if the core sees two it refuses to guess.

All functions are pure. Transitions return a new ArcEnrollment.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union
from uuid import UUID

from .catalog import Arc, arc_content_ids, get_arc, list_arcs_in_default_order
from .constants import LOW_ACTIVITY_SESSIONS_14D, LOW_QUALITY_RATING, ArcId, ArcStatus
from .errors import ArcNotFoundError, ArcTransitionError, InvalidInputError, InvariantViolation
from .models import ArcEnrollment, PauseInterval, TrainingSession

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]

PAUSE_REASONS: Dict[str, str] = {
    "busy": "Life got busy",
    "break": "Taking a break",
    "injury": "Injury/recovery",
    "travel": "Traveling",
    "other": "Other",
}

ARC_STATUS_DISPLAY: Dict[ArcStatus, Dict[str, str]] = {
    ArcStatus.INACTIVE: {"label": "Not Started", "icon": "⚪"},
    ArcStatus.ACTIVE: {"label": "In Progress", "icon": "🟢"},
    ArcStatus.PAUSED: {"label": "Paused", "icon": "⏸️"},
    ArcStatus.COMPLETED: {"label": "Completed", "icon": "✅"},
}


@dataclass(frozen=True)
class ArcProgress:
    """Display-ready snapshot of an enrollment."""
    enrollment_id: Optional[UUID]
    arc_id: ArcId
    status: ArcStatus
    day_index: int
    progress_percent: int
    day_label: str
    message: str
    completion_message: Optional[str] = None


@dataclass(frozen=True)
class NextArcSuggestion:
    """Next arc to offer. all_complete is a valid terminal state, not an error."""
    arc_id: Optional[ArcId]
    all_complete: bool


@dataclass(frozen=True)
class ArcRecommendation:
    recommend: bool
    arc_id: Optional[ArcId]
    reason: str


def _day(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def arc_for_enrollment(enrollment: ArcEnrollment) -> Arc:
    """Catalog arc of an enrollment. Unknown ids are a collaborator bug."""
    try:
        return get_arc(enrollment.arc_id)
    except ArcNotFoundError:
        raise InvariantViolation(
            f"Enrollment {enrollment.id} references unknown arc {enrollment.arc_id!r}"
        )


def paused_days(enrollment: ArcEnrollment, as_of: DateLike) -> int:
    """Calendar days spent paused up to as_of. An open pause runs to as_of."""
    as_of_day = _day(as_of)
    total = 0
    for interval in enrollment.pauses:
        start = min(_day(interval.paused_at), as_of_day)
        end = as_of_day if interval.resumed_at is None else min(_day(interval.resumed_at), as_of_day)
        total += max(0, (end - start).days)
    return total


def compute_day_index(enrollment: ArcEnrollment, as_of: DateLike) -> int:
    """
    Arc-relative day number (0-based), excluding paused days.

    Inactive enrollments are on day 0. Completed enrollments are frozen at
    their completion day.
    """
    if enrollment.started_at is None or enrollment.status == ArcStatus.INACTIVE:
        return 0

    effective = as_of
    if enrollment.status == ArcStatus.COMPLETED and enrollment.completed_at is not None:
        if _day(enrollment.completed_at) < _day(as_of):
            effective = enrollment.completed_at

    elapsed = (_day(effective) - _day(enrollment.started_at)).days
    return max(0, elapsed - paused_days(enrollment, effective))


def compute_progress_percent(day_index: int, arc: Arc) -> int:
    """round(100 * min(day_index + 1, duration) / duration), half-up, in [0, 100]."""
    if day_index < 0:
        raise InvalidInputError(f"day_index must be >= 0, got {day_index}", field="day_index")
    duration = arc.recommended_duration_days
    raw = 100 * min(day_index + 1, duration) / duration
    return max(0, min(100, int(math.floor(raw + 0.5))))


def session_engages_arc(session: TrainingSession, arc: Arc) -> bool:
    """A session counts for an arc when tagged with it or when it used arc content."""
    if session.arc_id is not None and session.arc_id == arc.id:
        return True
    return session.drill_id is not None and session.drill_id in arc_content_ids(arc)


def compute_status(
    enrollment: ArcEnrollment,
    sessions: Iterable[TrainingSession],
    as_of: DateLike,
) -> ArcStatus:
    """
    Status the enrollment should have at as_of.

    Only `active` can change here: it becomes `completed` once the final day
    is reached and a session referencing the arc was logged on or after it.
    """
    arc = arc_for_enrollment(enrollment)
    if enrollment.status != ArcStatus.ACTIVE:
        return enrollment.status

    final_day = arc.recommended_duration_days - 1
    if compute_day_index(enrollment, as_of) < final_day:
        return ArcStatus.ACTIVE

    start_day = _day(enrollment.started_at)
    as_of_day = _day(as_of)
    for session in sessions:
        if session.child_id != enrollment.child_id:
            continue
        logged = _day(session.created_at)
        if logged < start_day or logged > as_of_day:
            continue
        if session_engages_arc(session, arc) and compute_day_index(enrollment, session.created_at) >= final_day:
            return ArcStatus.COMPLETED

    return ArcStatus.ACTIVE


def find_current_enrollment(enrollments: Iterable[ArcEnrollment]) -> Optional[ArcEnrollment]:
    """
    The single active-or-paused enrollment, or None.

    Raises:
        InvariantViolation: more than one is current.
    """
    current = [e for e in enrollments if e.is_current]
    if len(current) > 1:
        ids = ", ".join(str(e.id) for e in current)
        raise InvariantViolation(f"Multiple active or paused enrollments: {ids}")
    return current[0] if current else None


# ===========================================
# TRANSITIONS
# ===========================================

def start_enrollment(
    child_id: UUID,
    arc_id: Union[ArcId, str],
    now: datetime,
    existing: Sequence[ArcEnrollment] = (),
) -> ArcEnrollment:
    """
    inactive -> active. Returns a new enrollment record.

    Raises:
        ArcNotFoundError: unknown arc id.
        ArcTransitionError: the child already has an active or paused arc.
    """
    arc = get_arc(arc_id)
    current = find_current_enrollment(e for e in existing if e.child_id == child_id)
    if current is not None:
        raise ArcTransitionError(
            "You already have an active arc. Complete or pause it first."
            if current.status == ArcStatus.ACTIVE
            else "You have a paused arc. Resume or finish it first."
        )
    return ArcEnrollment(
        child_id=child_id,
        arc_id=arc.id,
        status=ArcStatus.ACTIVE,
        started_at=now,
    )


def pause_enrollment(
    enrollment: ArcEnrollment,
    now: datetime,
    reason: Optional[str] = None,
) -> ArcEnrollment:
    """active -> paused. Records the pause start."""
    if enrollment.status != ArcStatus.ACTIVE:
        raise ArcTransitionError(f"Only an active arc can be paused (status is {enrollment.status.value})")
    if reason is not None and reason not in PAUSE_REASONS:
        raise InvalidInputError(f"Unknown pause reason: {reason!r}", field="reason")
    if enrollment.started_at is not None and now < enrollment.started_at:
        raise InvalidInputError("Pause time is before the arc started", field="now")
    return replace(
        enrollment,
        status=ArcStatus.PAUSED,
        pauses=enrollment.pauses + (PauseInterval(paused_at=now),),
        pause_reason=reason,
    )


def resume_enrollment(enrollment: ArcEnrollment, now: datetime) -> ArcEnrollment:
    """paused -> active. Closes the open pause so its days are excluded."""
    if enrollment.status != ArcStatus.PAUSED:
        raise ArcTransitionError(f"Only a paused arc can be resumed (status is {enrollment.status.value})")
    if not enrollment.pauses or not enrollment.pauses[-1].is_open:
        raise InvariantViolation(f"Paused enrollment {enrollment.id} has no open pause interval")
    open_pause = enrollment.pauses[-1]
    if now < open_pause.paused_at:
        raise InvalidInputError("Resume time is before the pause started", field="now")
    return replace(
        enrollment,
        status=ArcStatus.ACTIVE,
        pauses=enrollment.pauses[:-1] + (replace(open_pause, resumed_at=now),),
        pause_reason=None,
    )


def complete_enrollment(
    enrollment: ArcEnrollment,
    sessions: Iterable[TrainingSession],
    as_of: datetime,
) -> ArcEnrollment:
    """Apply compute_status. Returns the input unchanged when nothing moves."""
    status = compute_status(enrollment, sessions, as_of)
    if status != ArcStatus.COMPLETED or enrollment.status == ArcStatus.COMPLETED:
        return enrollment
    logger.info(f"Arc {enrollment.arc_id} completed for child {enrollment.child_id}")
    return replace(enrollment, status=ArcStatus.COMPLETED, completed_at=as_of)


# ===========================================
# SUGGESTIONS & DISPLAY
# ===========================================

def suggest_next_arc(completed_arc_ids: Iterable[Union[ArcId, str]]) -> NextArcSuggestion:
    """First arc in default order the child has not completed."""
    completed = {ArcId(a) for a in completed_arc_ids}
    for arc_id in list_arcs_in_default_order():
        if arc_id not in completed:
            return NextArcSuggestion(arc_id=arc_id, all_complete=False)
    return NextArcSuggestion(arc_id=None, all_complete=True)


def recommend_arc(
    has_current_arc: bool,
    sessions_last_14_days: int,
    completed_arc_ids: Sequence[Union[ArcId, str]],
    avg_quality_rating: Optional[float],
) -> ArcRecommendation:
    """Decide whether to nudge the child toward starting an arc."""
    if has_current_arc:
        return ArcRecommendation(recommend=False, arc_id=None, reason="")

    suggestion = suggest_next_arc(completed_arc_ids)

    # Low activity: a focused arc builds momentum
    if sessions_last_14_days < LOW_ACTIVITY_SESSIONS_14D and not suggestion.all_complete:
        return ArcRecommendation(
            recommend=True,
            arc_id=suggestion.arc_id,
            reason="Let's build momentum with a focused training arc!",
        )

    # Declining session quality: tempo brings back control
    if avg_quality_rating is not None and avg_quality_rating < LOW_QUALITY_RATING:
        return ArcRecommendation(
            recommend=True,
            arc_id=ArcId.TEMPO,
            reason="A focused arc can help bring structure back to your training.",
        )

    # Natural progression after finishing one
    if completed_arc_ids and not suggestion.all_complete:
        return ArcRecommendation(
            recommend=True,
            arc_id=suggestion.arc_id,
            reason="Ready for your next challenge?",
        )

    return ArcRecommendation(recommend=False, arc_id=None, reason="")


def get_progress_message(day_index: int, arc: Arc) -> str:
    """Motivational line for where the child is in the arc."""
    if day_index == 0:
        return "Let's go! Your arc begins today."

    percent = compute_progress_percent(day_index, arc)
    if percent >= 75:
        return "Almost there! The finish line is in sight."
    if percent >= 50:
        return "Halfway done. You're building something real."
    if percent >= 25:
        return "Great start. Keep the momentum going."
    return f"Day {day_index + 1} of {arc.recommended_duration_days}. Every session counts."


def day_label(day_index: int, arc: Arc) -> str:
    shown = min(day_index + 1, arc.recommended_duration_days)
    return f"Day {shown} of {arc.recommended_duration_days}"


def summarize_progress(
    enrollment: ArcEnrollment,
    sessions: Iterable[TrainingSession],
    as_of: datetime,
) -> ArcProgress:
    """Day index, percent, status and copy for one enrollment."""
    arc = arc_for_enrollment(enrollment)
    status = compute_status(enrollment, sessions, as_of)
    day_index = compute_day_index(enrollment, as_of)
    if status == ArcStatus.PAUSED:
        message = "Arc paused. Pick it back up whenever you're ready."
    else:
        message = get_progress_message(day_index, arc)
    return ArcProgress(
        enrollment_id=enrollment.id,
        arc_id=arc.id,
        status=status,
        day_index=day_index,
        progress_percent=compute_progress_percent(day_index, arc),
        day_label=day_label(day_index, arc),
        message=message,
        completion_message=arc.completion_message if status == ArcStatus.COMPLETED else None,
    )


def get_arc_status_display(status: ArcStatus) -> Dict[str, str]:
    return dict(ARC_STATUS_DISPLAY[ArcStatus(status)])


def completed_arc_ids(enrollments: Iterable[ArcEnrollment]) -> List[ArcId]:
    """Distinct completed arc ids, in default order."""
    done = {ArcId(e.arc_id) for e in enrollments if e.status == ArcStatus.COMPLETED}
    return [arc_id for arc_id in list_arcs_in_default_order() if arc_id in done]
