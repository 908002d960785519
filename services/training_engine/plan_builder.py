"""
Daily Plan Builder

Single source of truth for "what do I do today". Combines:
    - the session mode from today's check-in
    - the active arc's content for the current day index
    - recent session history (variety, streak)

Principles:
    - Deterministic: identical inputs give an identical plan. `as_of` is an
      input; there is no clock read or randomness below the entry point.
    - Adapt, never skip: on RECOVERY / LOW_BATTERY days arc content stays in
      the plan. High-intensity drills are swapped for their low-intensity
      variant and reps/minutes are scaled down. Recovery changes how a child
      trains, not whether.
    - Variety is a soft preference. A drill logged on 2 of the last 3 days is
      swapped for a same-track alternate when one exists (lowest key first).
    - Nothing-to-recommend states return a plan, never an error.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
from uuid import UUID

from .arc_progression import arc_for_enrollment, compute_day_index, compute_progress_percent, day_label
from .catalog import (
    Arc,
    Drill,
    GameIQModule,
    drills_by_track,
    game_iq_by_track,
    game_iq_for_age,
    get_drill,
    get_game_iq_module,
)
from .constants import (
    RECENT_SESSION_WINDOW,
    VARIETY_LOOKBACK_DAYS,
    VARIETY_REPEAT_THRESHOLD,
    ArcId,
    ArcStatus,
    DrillTrack,
    GameIQTrack,
    PlanItemKind,
    SessionMode,
)
from .errors import InvariantViolation, NoCheckInError
from .models import ArcEnrollment, CheckIn, TrainingSession
from .session_mode import SessionAdjustments, SessionModeResult, classify
from .streaks import calculate_streak, get_streak_milestone, streak_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanItem:
    """One drill or Game IQ module with its adjusted target."""
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
    substituted_for: Optional[str] = None   # high-intensity drill this replaces
    swapped_for: Optional[str] = None       # repeated drill this replaces for variety


@dataclass(frozen=True)
class DailyPlan:
    """Ephemeral recommendation for today. Regenerated on demand."""
    child_id: UUID
    generated_for: date
    mode: SessionMode
    mode_explanation: str
    adjustments: SessionAdjustments
    items: Tuple[PlanItem, ...]
    total_minutes: int
    explanation_copy: str
    streak_days: int
    coach_note: str
    arc_id: Optional[ArcId] = None
    arc_day_index: Optional[int] = None
    arc_day_label: Optional[str] = None
    arc_progress_percent: Optional[int] = None
    recovery_activity: Optional[str] = None

    @property
    def drills(self) -> List[PlanItem]:
        return [i for i in self.items if i.kind == PlanItemKind.DRILL]

    @property
    def game_iq_items(self) -> List[PlanItem]:
        return [i for i in self.items if i.kind == PlanItemKind.GAME_IQ]


# Fill order for general drills
DRILL_TRACK_PRIORITY: Tuple[DrillTrack, ...] = (
    DrillTrack.SCANNING,
    DrillTrack.DECISION_CHAIN,
    DrillTrack.TEMPO,
    DrillTrack.FIRST_TOUCH,
)

GAME_IQ_TRACKS_BY_MODE: Dict[SessionMode, Tuple[GameIQTrack, ...]] = {
    SessionMode.RECOVERY: (GameIQTrack.TEMPO, GameIQTrack.VISION),
    SessionMode.LOW_BATTERY: (GameIQTrack.DECISION_MAKING, GameIQTrack.VISION),
    SessionMode.NORMAL: (GameIQTrack.DECISION_MAKING, GameIQTrack.VISION),
    SessionMode.PEAK: (GameIQTrack.DECISION_MAKING, GameIQTrack.VISION),
}


def _day(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def scale(value: int, multiplier: float) -> int:
    """Half-up scaling, never below 1."""
    return max(1, int(math.floor(value * multiplier + 0.5)))


def find_overused_drills(
    sessions: Sequence[TrainingSession],
    as_of: datetime,
    lookback_days: int = VARIETY_LOOKBACK_DAYS,
    threshold: int = VARIETY_REPEAT_THRESHOLD,
) -> Set[str]:
    """Drills logged on >= threshold distinct days among the last lookback_days."""
    today = _day(as_of)
    days_by_drill: Dict[str, Set[date]] = {}
    for session in sessions:
        if session.drill_id is None:
            continue
        logged = _day(session.created_at)
        if 0 <= (today - logged).days < lookback_days:
            days_by_drill.setdefault(session.drill_id, set()).add(logged)
    return {drill_id for drill_id, days in days_by_drill.items() if len(days) >= threshold}


def _allowed(drill: Drill, adjustments: SessionAdjustments) -> bool:
    return adjustments.intense_drills_allowed or not drill.is_intense


def _adapt_intensity(drill: Drill, adjustments: SessionAdjustments) -> Tuple[Drill, Optional[str]]:
    """Swap a high-intensity drill for its low-intensity variant when needed."""
    if _allowed(drill, adjustments) or drill.low_intensity_variant is None:
        return drill, None
    return get_drill(drill.low_intensity_variant), drill.key


def _variety_alternate(
    drill: Drill,
    overused: Set[str],
    planned: Set[str],
    adjustments: SessionAdjustments,
) -> Optional[Drill]:
    """Same-track drill that is not repeated, not planned and allowed today."""
    for candidate in drills_by_track(drill.track):
        if candidate.key == drill.key or candidate.key in overused or candidate.key in planned:
            continue
        if _allowed(candidate, adjustments):
            return candidate
    return None


def _drill_item(
    drill: Drill,
    adjustments: SessionAdjustments,
    from_arc: bool,
    substituted_for: Optional[str] = None,
    swapped_for: Optional[str] = None,
) -> PlanItem:
    return PlanItem(
        kind=PlanItemKind.DRILL,
        content_id=drill.key,
        title=drill.title,
        track=drill.track.value,
        from_arc=from_arc,
        base_minutes=drill.duration_minutes,
        target_minutes=scale(drill.duration_minutes, adjustments.rep_multiplier),
        base_reps=drill.reps,
        target_reps=scale(drill.reps, adjustments.rep_multiplier) if drill.reps is not None else None,
        intensity=drill.intensity.value,
        substituted_for=substituted_for,
        swapped_for=swapped_for,
    )


def _game_iq_item(module: GameIQModule, from_arc: bool) -> PlanItem:
    return PlanItem(
        kind=PlanItemKind.GAME_IQ,
        content_id=module.id,
        title=module.title,
        track=module.focus_track.value,
        from_arc=from_arc,
        base_minutes=module.estimated_minutes,
        target_minutes=module.estimated_minutes,
    )


def _arc_drill_item(
    arc: Arc,
    day_index: int,
    adjustments: SessionAdjustments,
    overused: Set[str],
) -> PlanItem:
    scheduled = get_drill(arc.drill_ids[day_index % len(arc.drill_ids)])
    drill, substituted_for = _adapt_intensity(scheduled, adjustments)

    swapped_for = None
    if drill.key in overused:
        alternate = _variety_alternate(drill, overused, set(), adjustments)
        if alternate is not None:
            swapped_for = drill.key
            drill = alternate

    return _drill_item(
        drill,
        adjustments,
        from_arc=True,
        substituted_for=substituted_for,
        swapped_for=swapped_for,
    )


def _fill_general_drills(
    adjustments: SessionAdjustments,
    remaining_minutes: int,
    planned: Set[str],
    overused: Set[str],
) -> List[PlanItem]:
    """One drill per track, in priority order, while time remains."""
    items = []
    for track in DRILL_TRACK_PRIORITY:
        if remaining_minutes <= 0:
            break
        if track == DrillTrack.DECISION_CHAIN and not adjustments.include_decision_work:
            continue
        for drill in drills_by_track(track):
            if drill.key in planned or drill.key in overused or not _allowed(drill, adjustments):
                continue
            item = _drill_item(drill, adjustments, from_arc=False)
            if item.target_minutes <= remaining_minutes:
                items.append(item)
                planned.add(drill.key)
                remaining_minutes -= item.target_minutes
                break
    return items


def _general_game_iq(
    mode_result: SessionModeResult,
    as_of: datetime,
    child_age: Optional[int] = None,
) -> Optional[GameIQModule]:
    """
    Rotate through the mode's preferred tracks by calendar day.

    With a known age only age-appropriate modules are considered; a track
    with none is skipped.
    """
    suitable = None if child_age is None else {m.id for m in game_iq_for_age(child_age)}
    for track in GAME_IQ_TRACKS_BY_MODE[mode_result.mode]:
        modules = [m for m in game_iq_by_track(track) if suitable is None or m.id in suitable]
        if modules:
            return modules[_day(as_of).toordinal() % len(modules)]
    return None


def explanation_copy(mode: SessionMode, arc: Optional[Arc]) -> str:
    """'Why this plan today' line."""
    if arc is not None:
        subtitle = arc.subtitle.lower()
        return {
            SessionMode.PEAK: f"{arc.title}: You're at your best today. Let's push the {subtitle}.",
            SessionMode.NORMAL: f"{arc.title}: Solid day for building your {subtitle}.",
            SessionMode.LOW_BATTERY: f"{arc.title}: Lower energy is fine. We'll focus on the mental side today.",
            SessionMode.RECOVERY: f"{arc.title}: Recovery day. Light work keeps the arc going without strain.",
        }[mode]
    return {
        SessionMode.PEAK: "You're feeling great! Let's make the most of this energy.",
        SessionMode.NORMAL: "Solid session ahead. Fundamentals build champions.",
        SessionMode.LOW_BATTERY: "Taking it easy is smart. Quality over quantity today.",
        SessionMode.RECOVERY: "Rest is part of training. Light mental work keeps you sharp.",
    }[mode]


def build_today_plan(
    child_id: UUID,
    latest_check_in: Optional[CheckIn],
    active_enrollment: Optional[ArcEnrollment],
    recent_sessions: Iterable[TrainingSession],
    as_of: Optional[datetime] = None,
    recent_window: int = RECENT_SESSION_WINDOW,
    session_dates: Optional[Iterable[datetime]] = None,
    child_age: Optional[int] = None,
) -> DailyPlan:
    """
    Compose today's plan.

    Args:
        child_id: Child the plan is for
        latest_check_in: Most recent check-in (must be from as_of's day)
        active_enrollment: Current arc enrollment, if any
        recent_sessions: Session history, any order; the newest
            recent_window drive variety
        as_of: Moment the plan is for (defaults to now)
        recent_window: How many of the newest sessions the variety check inspects
        session_dates: Full session history for the streak; defaults to the
            dates of recent_sessions
        child_age: Age in years, filters general Game IQ modules when known

    Raises:
        NoCheckInError: no check-in for today.
        InvariantViolation: inputs belong to another child, or the enrollment
            references an arc that is not in the catalog.
    """
    as_of = as_of or datetime.now()

    if latest_check_in is None:
        raise NoCheckInError(str(child_id))
    if latest_check_in.child_id != child_id:
        raise InvariantViolation(f"Check-in {latest_check_in.id} belongs to another child")
    if latest_check_in.created_at is not None and _day(latest_check_in.created_at) != _day(as_of):
        raise NoCheckInError(
            str(child_id),
            f"Latest check-in for child {child_id} is from {_day(latest_check_in.created_at)}, not today",
        )

    sessions = list(recent_sessions)
    for session in sessions:
        if session.child_id != child_id:
            raise InvariantViolation(f"Session {session.id} belongs to another child")

    mode_result = classify(latest_check_in)
    adjustments = mode_result.adjustments

    newest = sorted(sessions, key=lambda s: s.created_at, reverse=True)[:recent_window]
    overused = find_overused_drills(newest, as_of)

    arc = None
    day_index = None
    if active_enrollment is not None:
        if active_enrollment.child_id != child_id:
            raise InvariantViolation(f"Enrollment {active_enrollment.id} belongs to another child")
        enrolled_arc = arc_for_enrollment(active_enrollment)
        if active_enrollment.status == ArcStatus.ACTIVE:
            arc = enrolled_arc
            day_index = compute_day_index(active_enrollment, as_of)

    drill_items: List[PlanItem] = []
    game_iq_items: List[PlanItem] = []
    planned: Set[str] = set()

    if arc is not None:
        arc_drill = _arc_drill_item(arc, day_index, adjustments, overused)
        drill_items.append(arc_drill)
        planned.add(arc_drill.content_id)

        module = get_game_iq_module(arc.game_iq_ids[day_index % len(arc.game_iq_ids)])
        game_iq_items.append(_game_iq_item(module, from_arc=True))
    elif adjustments.game_iq_emphasis:
        module = _general_game_iq(mode_result, as_of, child_age)
        if module is not None:
            game_iq_items.append(_game_iq_item(module, from_arc=False))

    used = sum(i.target_minutes for i in drill_items + game_iq_items)
    remaining = adjustments.suggested_duration_minutes - used
    drill_items.extend(_fill_general_drills(adjustments, remaining, planned, overused))

    if adjustments.game_iq_emphasis:
        items = game_iq_items + drill_items
    else:
        items = drill_items + game_iq_items

    if session_dates is None:
        session_dates = [s.created_at for s in sessions]
    streak = calculate_streak(session_dates, today=as_of)

    plan = DailyPlan(
        child_id=child_id,
        generated_for=_day(as_of),
        mode=mode_result.mode,
        mode_explanation=mode_result.explanation,
        adjustments=adjustments,
        items=tuple(items),
        total_minutes=sum(i.target_minutes for i in items),
        explanation_copy=explanation_copy(mode_result.mode, arc),
        streak_days=streak,
        coach_note=get_streak_milestone(streak) or streak_message(streak),
        arc_id=arc.id if arc else None,
        arc_day_index=day_index,
        arc_day_label=day_label(day_index, arc) if arc else None,
        arc_progress_percent=compute_progress_percent(day_index, arc) if arc else None,
        recovery_activity=arc.recovery_activity if arc and mode_result.mode == SessionMode.RECOVERY else None,
    )

    logger.info(
        f"Plan for {child_id} on {plan.generated_for}: mode={plan.mode.value}, "
        f"arc={plan.arc_id.value if plan.arc_id else None}, items={len(plan.items)}, "
        f"minutes={plan.total_minutes}"
    )
    return plan
