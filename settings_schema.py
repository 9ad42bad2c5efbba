from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_MUSCLE_GROUP_ALIASES: Dict[str, List[str]] = {
    "Chest": ["Chest", "Pectorals", "Pecs"],
    "Back": ["Back", "Lats", "Latissimus", "Rhomboids", "Traps"],
    "Shoulders": ["Shoulders", "Delts", "Deltoids"],
    "Arms": ["Biceps", "Triceps", "Forearms", "Arms"],
    "Legs": ["Quads", "Quadriceps", "Hamstrings", "Glutes", "Calves", "Legs"],
    "Core": ["Abs", "Core", "Obliques", "Abdominals"],
    "Cardio": ["Cardio", "Full Body"],
}

DEFAULT_LIFT_ALIASES: Dict[str, List[str]] = {
    "Bench Press": ["Barbell Bench Press", "Flat Bench Press", "Flat Barbell Bench Press"],
    "Squat": ["Back Squat", "Barbell Squat", "Barbell Back Squat"],
    "Deadlift": ["Conventional Deadlift", "Barbell Deadlift"],
    "Overhead Press": ["Military Press", "Standing Overhead Press", "Barbell Overhead Press", "OHP"],
    "Barbell Row": ["Bent Over Row", "Bent-Over Row", "Bent Over Barbell Row"],
}


class ImbalanceThresholds(BaseModel):
    deviation: float = 15.0
    high_severity: float = 25.0
    push_category: str = "Chest"
    pull_category: str = "Back"
    push_pull_high: float = 1.3
    push_pull_low: float = 0.7


class TrendThresholds(BaseModel):
    stable: float = 0.1
    strong: float = 0.5
    consistency_min_points: int = 3
    projection_window: int = 5
    projection_min_points: int = 3
    month_sessions: int = 4
    quarter_sessions: int = 12
    best_set_limit: int = 10


class RatioDefinition(BaseModel):
    name: str
    primary: str
    secondary: List[str]
    ideal: float = Field(gt=0)
    under_recommendation: str = "Monitor this ratio over time"
    over_recommendation: str = "Monitor this ratio over time"

    @field_validator("secondary")
    @classmethod
    def _secondary_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one secondary exercise is required")
        return value


DEFAULT_STRENGTH_RATIOS: List[RatioDefinition] = [
    RatioDefinition(
        name="Bench Press vs Row",
        primary="Bench Press",
        secondary=["Barbell Row", "T-Bar Row"],
        ideal=1.0,
        under_recommendation="Focus more on horizontal pulling exercises (rows, reverse flyes)",
        over_recommendation="Your pulling strength is well developed relative to pressing",
    ),
    RatioDefinition(
        name="Squat vs Deadlift",
        primary="Squat",
        secondary=["Deadlift"],
        ideal=0.85,
        under_recommendation="Work on squat technique and quadriceps strength",
        over_recommendation="Good balance between squat and deadlift strength",
    ),
    RatioDefinition(
        name="Overhead Press vs Bench",
        primary="Overhead Press",
        secondary=["Bench Press"],
        ideal=0.66,
        under_recommendation="Include more overhead pressing movements",
        over_recommendation="Strong overhead pressing relative to bench press",
    ),
    RatioDefinition(
        name="Front Squat vs Back Squat",
        primary="Front Squat",
        secondary=["Squat"],
        ideal=0.85,
        under_recommendation="Improve front squat technique and core/upper back strength",
        over_recommendation="Good front squat strength relative to back squat",
    ),
]


class RatioStatusBands(BaseModel):
    """Upper bounds (exclusive) of deviation percent per ratio status."""

    excellent: float = 10.0
    good: float = 20.0
    needs_attention: float = 35.0


class BalanceLabelBands(BaseModel):
    """Share of ratios (percent) needed for each overall balance label."""

    excellent_share: float = 60.0
    concerning_share: float = 40.0
    good_share: float = 80.0


class VolumeInsightThresholds(BaseModel):
    increase_percent: float = 10.0
    decrease_percent: float = -10.0
    high_consistency: float = 80.0
    low_consistency: float = 50.0
    low_frequency: float = 2.0
    high_frequency: float = 6.0
    top_exercises: int = 3


class FrequencyThresholds(BaseModel):
    low_frequency: float = 2.0
    ideal_min: float = 3.0
    ideal_max: float = 5.0
    high_frequency: float = 6.0
    low_consistency: float = 60.0
    high_consistency: float = 80.0
    short_session_minutes: float = 30.0
    long_session_minutes: float = 120.0
    streak_gap_days: int = 2
    streak_break_days: int = 3
    long_streak: int = 7


class RecencyBands(BaseModel):
    recent_days: int = 7
    moderate_days: int = 30


class FrequencyBand(BaseModel):
    """Inclusive workouts/week range worth ``points``; ``high=None`` is open."""

    low: float
    high: Optional[float] = None
    points: int


class RatingTier(BaseModel):
    min_percentage: int
    label: str


class ScoreTable(BaseModel):
    component_max: int = 25
    imbalance_steps: List[List[int]] = [[0, 25], [2, 15], [4, 10]]
    imbalance_floor: int = 5
    balance_points: Dict[str, int] = {
        "excellent": 25,
        "good": 20,
        "fair": 15,
        "needs_improvement": 10,
    }
    balance_floor: int = 5
    consistency_weight: float = 0.25
    frequency_bands: List[FrequencyBand] = [
        FrequencyBand(low=3, high=5, points=25),
        FrequencyBand(low=2, high=3, points=20),
        FrequencyBand(low=5, high=6, points=20),
        FrequencyBand(low=1, high=2, points=15),
        FrequencyBand(low=6, high=None, points=10),
    ]
    frequency_floor: int = 5
    rating_tiers: List[RatingTier] = [
        RatingTier(min_percentage=90, label="Elite"),
        RatingTier(min_percentage=80, label="Advanced"),
        RatingTier(min_percentage=70, label="Intermediate"),
        RatingTier(min_percentage=60, label="Beginner+"),
        RatingTier(min_percentage=50, label="Beginner"),
    ]
    rating_floor: str = "Getting Started"


class AnalyticsSettings(BaseModel):
    """Tunable tables used by the analyzers."""

    imbalance: ImbalanceThresholds = ImbalanceThresholds()
    muscle_group_aliases: Dict[str, List[str]] = DEFAULT_MUSCLE_GROUP_ALIASES
    trend: TrendThresholds = TrendThresholds()
    strength_ratios: List[RatioDefinition] = DEFAULT_STRENGTH_RATIOS
    lift_aliases: Dict[str, List[str]] = DEFAULT_LIFT_ALIASES
    ratio_status: RatioStatusBands = RatioStatusBands()
    balance_labels: BalanceLabelBands = BalanceLabelBands()
    volume_insights: VolumeInsightThresholds = VolumeInsightThresholds()
    frequency: FrequencyThresholds = FrequencyThresholds()
    recency: RecencyBands = RecencyBands()
    score: ScoreTable = ScoreTable()
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)
    dashboard_records_limit: int = Field(default=5, ge=0)

    def canonical_muscle_group(self, name: str) -> str:
        """Map an alias such as ``Pecs`` onto its category (``Chest``)."""
        key = (name or "").strip().lower()
        for group, aliases in self.muscle_group_aliases.items():
            if key == group.lower() or key in (a.lower() for a in aliases):
                return group
        return (name or "").strip() or "Uncategorized"

    def canonical_lift(self, name: str) -> str:
        """Lower-cased lift key with variants such as ``Back Squat`` folded into ``squat``."""
        key = (name or "").strip().lower()
        for lift, aliases in self.lift_aliases.items():
            if key == lift.strip().lower() or key in (a.strip().lower() for a in aliases):
                return lift.strip().lower()
        return key

    def lift_variants(self, name: str) -> List[str]:
        key = self.canonical_lift(name)
        variants = [key]
        for lift, aliases in self.lift_aliases.items():
            if lift.strip().lower() == key:
                variants.extend(a.strip().lower() for a in aliases)
        return variants

    def ratio(self, name: str) -> RatioDefinition:
        for definition in self.strength_ratios:
            if definition.name == name:
                return definition
        raise ValueError(f"unknown strength ratio: {name}")


def validate_settings(data: dict) -> AnalyticsSettings:
    try:
        return AnalyticsSettings(**data)
    except ValidationError as e:
        raise ValueError(str(e))
