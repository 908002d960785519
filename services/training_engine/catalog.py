"""
Arc Catalog

Compiled-in registry of training arcs and the content they reference
(skill drills and Game IQ modules). Immutable: the mappings are exposed as
read-only proxies and validated once at import. A broken reference is an
authoring bug, so it fails the import rather than surfacing at plan time.

Usage:
    arc = get_arc(ArcId.VISION)
    order = list_arcs_in_default_order()
    drill = get_drill("scanning.3point_scan")
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .constants import ArcId, DrillIntensity, DrillTrack, GameIQTrack, IntensityBias
from .errors import ArcNotFoundError, CatalogError


@dataclass(frozen=True)
class Drill:
    """A skill drill the plan builder can schedule."""
    key: str
    title: str
    track: DrillTrack
    duration_minutes: int
    intensity: DrillIntensity
    reps: Optional[int] = None               # None = time-based drill
    low_intensity_variant: Optional[str] = None
    why_it_matters: str = ""
    coach_tips: Tuple[str, ...] = ()

    @property
    def is_intense(self) -> bool:
        return self.intensity == DrillIntensity.HIGH


@dataclass(frozen=True)
class GameIQModule:
    """A mental/tactical lesson."""
    id: str
    title: str
    focus_track: GameIQTrack
    estimated_minutes: int
    explanation: str
    age_min: int = 8
    age_max: int = 18
    key_takeaways: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Arc:
    """A multi-day curricular track."""
    id: ArcId
    title: str
    subtitle: str
    icon: str
    color: str
    recommended_duration_days: int
    drill_ids: Tuple[str, ...]
    game_iq_ids: Tuple[str, ...]
    player_description: str
    parent_explanation: str
    completion_message: str
    intensity_bias: IntensityBias = IntensityBias.NORMAL
    recovery_focus: str = ""
    recovery_activity: str = ""
    version: int = 1


# ===========================================
# SKILL DRILLS
# ===========================================

_DRILLS: Tuple[Drill, ...] = (
    # Scanning
    Drill(
        key="scanning.3point_scan",
        title="3-Point Scan",
        track=DrillTrack.SCANNING,
        duration_minutes=5,
        intensity=DrillIntensity.LOW,
        reps=12,
        why_it_matters="Elite players scan 3+ times before receiving. This builds the habit of checking shoulders before the ball arrives.",
        coach_tips=(
            "Head should move like a swivel - quick, purposeful snaps",
            "Focus on WHAT you see, not just that you looked",
        ),
    ),
    Drill(
        key="scanning.color_cue",
        title="Color Cue Recognition",
        track=DrillTrack.SCANNING,
        duration_minutes=4,
        intensity=DrillIntensity.LOW,
        reps=15,
        why_it_matters="Training your brain to spot teammates vs opponents by jersey color builds instant recognition in matches.",
        coach_tips=(
            "Start slow, speed up as recognition improves",
            "Call out colors out loud to reinforce the connection",
        ),
    ),
    Drill(
        key="scanning.scan_and_sprint",
        title="Scan and Sprint",
        track=DrillTrack.SCANNING,
        duration_minutes=6,
        intensity=DrillIntensity.HIGH,
        reps=8,
        low_intensity_variant="scanning.3point_scan",
        why_it_matters="Scanning while moving fast is what happens in real matches.",
        coach_tips=(
            "Scan on the way, sprint after the call",
            "Full recovery walk between reps",
        ),
    ),
    # Decision chain
    Drill(
        key="decision_chain.receive_decide_execute",
        title="Receive-Decide-Execute",
        track=DrillTrack.DECISION_CHAIN,
        duration_minutes=6,
        intensity=DrillIntensity.MODERATE,
        reps=10,
        why_it_matters="The best players decide BEFORE the ball arrives. This drill trains your brain to have a plan ready.",
        coach_tips=(
            "Say your decision OUT LOUD before the ball comes",
            "Options: turn, play back, switch, drive, shoot",
        ),
    ),
    Drill(
        key="decision_chain.two_step_advantage",
        title="2-Step Advantage",
        track=DrillTrack.DECISION_CHAIN,
        duration_minutes=5,
        intensity=DrillIntensity.MODERATE,
        reps=8,
        why_it_matters="Elite midfielders think 2 moves ahead. If I pass here, where do I run?",
        coach_tips=(
            "Visualize: Pass, Movement, Next Action",
            "Start with just 2 steps, then try 3 as you improve",
        ),
    ),
    Drill(
        key="decision_chain.third_man_awareness",
        title="Third Man Awareness",
        track=DrillTrack.DECISION_CHAIN,
        duration_minutes=5,
        intensity=DrillIntensity.LOW,
        why_it_matters="The third man is the player who receives after the first combination. Seeing this unlocks advanced playmaking.",
        coach_tips=(
            "Look for the player making the run past the first pass",
            "Think: if I pass to A, who can A find?",
        ),
    ),
    Drill(
        key="decision_chain.pressure_decide_sprint",
        title="Decide Under Pressure",
        track=DrillTrack.DECISION_CHAIN,
        duration_minutes=6,
        intensity=DrillIntensity.HIGH,
        reps=8,
        low_intensity_variant="decision_chain.receive_decide_execute",
        why_it_matters="Match decisions happen at full speed. This drill adds a sprint before every choice.",
        coach_tips=(
            "Sprint to the cone, then decide fast",
            "Quick decisions beat perfect ones",
        ),
    ),
    # Tempo
    Drill(
        key="tempo.breathing_rhythm",
        title="Breathing Rhythm",
        track=DrillTrack.TEMPO,
        duration_minutes=4,
        intensity=DrillIntensity.LOW,
        why_it_matters="Calm breathing keeps your decisions sharp when the game speeds up.",
        coach_tips=(
            "In for 4, hold for 4, out for 4",
            "Keep your shoulders loose",
        ),
    ),
    Drill(
        key="tempo.patience_in_possession",
        title="Patience in Possession",
        track=DrillTrack.TEMPO,
        duration_minutes=5,
        intensity=DrillIntensity.MODERATE,
        reps=10,
        why_it_matters="Keeping the ball calmly draws defenders in and opens space for teammates.",
        coach_tips=(
            "Slow touches, big eyes",
            "Count two seconds before releasing the ball",
        ),
    ),
    Drill(
        key="tempo.urgency_recognition",
        title="Urgency Recognition",
        track=DrillTrack.TEMPO,
        duration_minutes=5,
        intensity=DrillIntensity.HIGH,
        reps=8,
        low_intensity_variant="tempo.patience_in_possession",
        why_it_matters="Knowing when to explode forward is as important as knowing when to wait.",
        coach_tips=(
            "React to the cue, then burst for 5 yards",
            "Reset fully before the next rep",
        ),
    ),
    # First touch
    Drill(
        key="first_touch.soft_cushion",
        title="Soft Cushion Control",
        track=DrillTrack.FIRST_TOUCH,
        duration_minutes=4,
        intensity=DrillIntensity.LOW,
        reps=20,
        why_it_matters="A soft first touch buys you time on the ball.",
        coach_tips=("Relax the receiving foot", "Meet the ball, then give with it"),
    ),
    Drill(
        key="first_touch.wall_pass_control",
        title="Wall Pass Control",
        track=DrillTrack.FIRST_TOUCH,
        duration_minutes=6,
        intensity=DrillIntensity.MODERATE,
        reps=20,
        why_it_matters="Repetition against a wall grooves a clean, directional first touch.",
        coach_tips=("Alternate feet every rep", "Touch away from imaginary pressure"),
    ),
    Drill(
        key="first_touch.explosive_first_touch",
        title="Explosive First Touch",
        track=DrillTrack.FIRST_TOUCH,
        duration_minutes=5,
        intensity=DrillIntensity.HIGH,
        reps=10,
        low_intensity_variant="first_touch.soft_cushion",
        why_it_matters="Touch into space and accelerate away from pressure.",
        coach_tips=("Push the ball 2 yards ahead", "Chase it at full speed"),
    ),
)


# ===========================================
# GAME IQ MODULES
# ===========================================

_GAME_IQ_MODULES: Tuple[GameIQModule, ...] = (
    GameIQModule(
        id="vision.scanning_basics",
        title="Scanning Basics",
        focus_track=GameIQTrack.VISION,
        estimated_minutes=5,
        explanation="Learn why elite players look around BEFORE the ball arrives, and how to build this habit.",
        key_takeaways=("Scan before the ball arrives, not after", "Look for space, teammates, and pressure"),
    ),
    GameIQModule(
        id="vision.reading_pressure",
        title="Reading Pressure",
        focus_track=GameIQTrack.VISION,
        estimated_minutes=6,
        explanation="Understand how to quickly assess if you have time on the ball or need to play faster.",
        age_min=10,
        key_takeaways=("Check defender distance and speed", "No time = simple is best"),
    ),
    GameIQModule(
        id="vision.finding_the_free_player",
        title="Finding the Free Player",
        focus_track=GameIQTrack.VISION,
        estimated_minutes=5,
        explanation="Train your eyes to spot the unmarked teammate who can move the ball forward.",
        age_min=9,
    ),
    GameIQModule(
        id="tempo.calm_vs_rush",
        title="Calm vs Rush",
        focus_track=GameIQTrack.TEMPO,
        estimated_minutes=5,
        explanation="Understand when to speed up and when staying calm is the smarter choice.",
        age_min=9,
    ),
    GameIQModule(
        id="tempo.managing_game_state",
        title="Managing Game State",
        focus_track=GameIQTrack.TEMPO,
        estimated_minutes=6,
        explanation="Learn how the score, time, and situation should change your approach.",
        age_min=11,
    ),
    GameIQModule(
        id="tempo.breathing_under_pressure",
        title="Breathing Under Pressure",
        focus_track=GameIQTrack.TEMPO,
        estimated_minutes=4,
        explanation="Use breathing techniques to stay calm in high-pressure moments.",
    ),
    GameIQModule(
        id="decision.first_touch_direction",
        title="First Touch Direction",
        focus_track=GameIQTrack.DECISION_MAKING,
        estimated_minutes=5,
        explanation="Your first touch sets up your next move. Learn to use it with intention.",
        age_min=9,
    ),
    GameIQModule(
        id="decision.when_to_dribble",
        title="When to Dribble",
        focus_track=GameIQTrack.DECISION_MAKING,
        estimated_minutes=5,
        explanation="Dribbling is a tool, not a default. Learn when it helps and when it hurts.",
        age_min=9,
    ),
    GameIQModule(
        id="decision.next_move_anticipation",
        title="Next Move Anticipation",
        focus_track=GameIQTrack.DECISION_MAKING,
        estimated_minutes=6,
        explanation="Think beyond the current play. What happens after your action?",
        age_min=10,
    ),
    GameIQModule(
        id="positioning.creating_angles",
        title="Creating Passing Angles",
        focus_track=GameIQTrack.POSITIONING,
        estimated_minutes=5,
        explanation="Learn how small movements open up passing lanes.",
        age_min=9,
    ),
    GameIQModule(
        id="positioning.spacing_awareness",
        title="Spacing Awareness",
        focus_track=GameIQTrack.POSITIONING,
        estimated_minutes=5,
        explanation="Good teams maintain shape. Understand your role in team spacing.",
        age_min=10,
    ),
)


# ===========================================
# TRAINING ARCS
# ===========================================

_ARCS: Tuple[Arc, ...] = (
    Arc(
        id=ArcId.VISION,
        title="Vision Arc",
        subtitle="See It Before It Happens",
        icon="👁️",
        color="cyan",
        recommended_duration_days=5,
        drill_ids=(
            "scanning.3point_scan",
            "scanning.color_cue",
            "scanning.scan_and_sprint",
        ),
        game_iq_ids=(
            "vision.scanning_basics",
            "vision.reading_pressure",
            "vision.finding_the_free_player",
        ),
        player_description="This week, you're training to see the game like a pro. Elite players scan the field BEFORE the ball arrives.",
        parent_explanation="The Vision Arc focuses on field awareness and scanning habits. These mental skills help players see more of the field.",
        completion_message="Vision Arc Complete! You've trained your eyes to see more of the field. Keep scanning - it's a habit now.",
        intensity_bias=IntensityBias.NORMAL,
        recovery_focus="Recovery day for Vision Arc",
        recovery_activity="Watch a match clip and count how many times players scan before receiving.",
    ),
    Arc(
        id=ArcId.TEMPO,
        title="Tempo Arc",
        subtitle="Control the Rhythm",
        icon="🎵",
        color="purple",
        recommended_duration_days=5,
        drill_ids=(
            "tempo.breathing_rhythm",
            "tempo.patience_in_possession",
            "tempo.urgency_recognition",
        ),
        game_iq_ids=(
            "tempo.calm_vs_rush",
            "tempo.managing_game_state",
            "tempo.breathing_under_pressure",
        ),
        player_description="This week, you're mastering the tempo of the game. The best players know when to speed up and when to stay calm.",
        parent_explanation="The Tempo Arc teaches game rhythm and emotional regulation, including breathing techniques for staying calm under pressure.",
        completion_message="Tempo Arc Complete! You now understand when to speed up and when to stay cool. That's elite-level control.",
        intensity_bias=IntensityBias.LIGHT,
        recovery_focus="Recovery day for Tempo Arc",
        recovery_activity="Practice breathing exercises or visualize controlling the rhythm of play.",
    ),
    Arc(
        id=ArcId.DECISION_CHAIN,
        title="Decision Chain Arc",
        subtitle="Think 2 Moves Ahead",
        icon="🔗",
        color="orange",
        recommended_duration_days=7,
        drill_ids=(
            "decision_chain.receive_decide_execute",
            "decision_chain.two_step_advantage",
            "decision_chain.third_man_awareness",
            "decision_chain.pressure_decide_sprint",
        ),
        game_iq_ids=(
            "decision.first_touch_direction",
            "decision.when_to_dribble",
            "decision.next_move_anticipation",
        ),
        player_description="This week, you're training your brain to think ahead. Great players don't just react - they anticipate.",
        parent_explanation="The Decision Chain Arc develops anticipation and planning skills. This is tactical intelligence training.",
        completion_message="Decision Chain Arc Complete! Your brain is now wired to think ahead. That's how playmakers are built.",
        intensity_bias=IntensityBias.NORMAL,
        recovery_focus="Recovery day for Decision Chain Arc",
        recovery_activity="Watch highlights and pause before each play - what would you do next?",
    ),
)

DEFAULT_ARC_ORDER: Tuple[ArcId, ...] = (ArcId.VISION, ArcId.TEMPO, ArcId.DECISION_CHAIN)


def validate_catalog(
    arcs: Mapping[ArcId, Arc],
    drills: Mapping[str, Drill],
    modules: Mapping[str, GameIQModule],
) -> List[str]:
    """Return a list of authoring problems (empty when the catalog is sound)."""
    problems = []

    for arc in arcs.values():
        if arc.recommended_duration_days <= 0:
            problems.append(f"{arc.id.value}: recommended_duration_days must be > 0")
        if not arc.drill_ids:
            problems.append(f"{arc.id.value}: drill_ids is empty")
        if not arc.game_iq_ids:
            problems.append(f"{arc.id.value}: game_iq_ids is empty")
        for drill_id in arc.drill_ids:
            if drill_id not in drills:
                problems.append(f"{arc.id.value}: unknown drill {drill_id}")
        for module_id in arc.game_iq_ids:
            if module_id not in modules:
                problems.append(f"{arc.id.value}: unknown game iq module {module_id}")

    for drill in drills.values():
        if drill.duration_minutes <= 0:
            problems.append(f"{drill.key}: duration_minutes must be > 0")
        if drill.reps is not None and drill.reps <= 0:
            problems.append(f"{drill.key}: reps must be > 0")
        if drill.low_intensity_variant is None:
            if drill.is_intense:
                problems.append(f"{drill.key}: high intensity drill has no low_intensity_variant")
            continue
        variant = drills.get(drill.low_intensity_variant)
        if variant is None:
            problems.append(f"{drill.key}: unknown variant {drill.low_intensity_variant}")
        elif variant.track != drill.track:
            problems.append(f"{drill.key}: variant {variant.key} is on another track")
        elif variant.is_intense:
            problems.append(f"{drill.key}: variant {variant.key} is high intensity")

    for arc_id in DEFAULT_ARC_ORDER:
        if arc_id not in arcs:
            problems.append(f"default order references missing arc {arc_id.value}")

    return problems


def _build() -> Tuple[Mapping[ArcId, Arc], Mapping[str, Drill], Mapping[str, GameIQModule]]:
    drills: Dict[str, Drill] = {d.key: d for d in _DRILLS}
    modules: Dict[str, GameIQModule] = {m.id: m for m in _GAME_IQ_MODULES}
    arcs: Dict[ArcId, Arc] = {a.id: a for a in _ARCS}

    problems = validate_catalog(arcs, drills, modules)
    if problems:
        raise CatalogError("Invalid training catalog: " + "; ".join(problems))

    return MappingProxyType(arcs), MappingProxyType(drills), MappingProxyType(modules)


TRAINING_ARCS, SKILL_DRILLS, GAME_IQ_MODULES = _build()


def get_arc(arc_id: Union[ArcId, str]) -> Arc:
    """
    Get an arc by id.

    Raises:
        ArcNotFoundError: id is not in the catalog.
    """
    try:
        return TRAINING_ARCS[ArcId(arc_id)]
    except (ValueError, KeyError):
        raise ArcNotFoundError(str(getattr(arc_id, "value", arc_id)))


def list_arcs_in_default_order() -> List[ArcId]:
    """Arc ids in suggested progression order."""
    return list(DEFAULT_ARC_ORDER)


def get_all_arcs() -> List[Arc]:
    return [TRAINING_ARCS[arc_id] for arc_id in DEFAULT_ARC_ORDER]


def get_drill(key: str) -> Optional[Drill]:
    return SKILL_DRILLS.get(key)


def get_game_iq_module(module_id: str) -> Optional[GameIQModule]:
    return GAME_IQ_MODULES.get(module_id)


def drills_by_track(track: DrillTrack) -> List[Drill]:
    """Drills on a track, lowest key first."""
    return sorted(
        (d for d in SKILL_DRILLS.values() if d.track == DrillTrack(track)),
        key=lambda d: d.key,
    )


def game_iq_by_track(track: GameIQTrack) -> List[GameIQModule]:
    """Game IQ modules on a track, lowest id first."""
    return sorted(
        (m for m in GAME_IQ_MODULES.values() if m.focus_track == GameIQTrack(track)),
        key=lambda m: m.id,
    )


def game_iq_for_age(age: int) -> List[GameIQModule]:
    return sorted(
        (m for m in GAME_IQ_MODULES.values() if m.age_min <= age <= m.age_max),
        key=lambda m: m.id,
    )


def arc_content_ids(arc: Arc) -> frozenset:
    """Every content id (drills and Game IQ) that belongs to an arc."""
    return frozenset(arc.drill_ids) | frozenset(arc.game_iq_ids)
