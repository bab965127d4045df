import pytest

from app.schemas.debrief import MetricsSchema
from app.services.debrief import assemble_debrief, compute_tier


def _metrics(mission_score: int, **overrides) -> MetricsSchema:
    values = dict(
        decision_quality=60,
        confidence_alignment=100,
        cri=78,
        bias_awareness=47,
        trust_calibration=56,
        information_advantage=29,
        cognitive_adaptability=50,
        escalation_tendency=40,
        reflection_quality=53,
        mission_score=mission_score,
    )
    values.update(overrides)
    return MetricsSchema(**values)


@pytest.mark.parametrize(
    ("score", "tier"),
    [
        (100, "Strong decision alignment"),
        (75, "Strong decision alignment"),
        (74, "Competent with growth areas"),
        (50, "Competent with growth areas"),
        (49, "Significant gaps to address"),
        (0, "Significant gaps to address"),
    ],
)
def test_tier_bands(score: int, tier: str) -> None:
    assert compute_tier(score) == tier


def test_feedback_lines() -> None:
    debrief = assemble_debrief(_metrics(68))

    assert debrief.short_feedback.line1 == "Mission Score: 68 — Competent with growth areas"
    assert debrief.short_feedback.line2 == "Decision Quality 60 · CRI 78 · Reflection 53"
    assert debrief.metrics.mission_score == 68


def test_debrief_is_immutable_and_serializes_cri_alias() -> None:
    debrief = assemble_debrief(_metrics(80))

    with pytest.raises(Exception):
        debrief.short_feedback.line1 = "x"
    assert debrief.model_dump(by_alias=True)["metrics"]["CRI"] == 78
