"""Short, deterministic feedback lines wrapped around computed metrics."""
from app.schemas.debrief import DebriefSchema, MetricsSchema, ShortFeedbackSchema

# (minimum mission score, tier label), checked top-down
TIER_BANDS = [
    (75, "Strong decision alignment"),
    (50, "Competent with growth areas"),
    (0, "Significant gaps to address"),
]


def compute_tier(mission_score: int) -> str:
    """Return tier label from mission score (0-100)."""
    for low, label in TIER_BANDS:
        if mission_score >= low:
            return label
    return TIER_BANDS[-1][1]


def assemble_debrief(metrics: MetricsSchema) -> DebriefSchema:
    line1 = f"Mission Score: {metrics.mission_score} — {compute_tier(metrics.mission_score)}"
    line2 = (
        f"Decision Quality {metrics.decision_quality} · CRI {metrics.cri} "
        f"· Reflection {metrics.reflection_quality}"
    )
    return DebriefSchema(metrics=metrics, short_feedback=ShortFeedbackSchema(line1=line1, line2=line2))
