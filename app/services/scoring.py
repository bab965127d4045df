"""Debrief metrics from locked decisions and the reflection essay.

All functions here are pure: no I/O, same input -> same output.
"""
import math
from dataclasses import dataclass
from typing import Mapping

from app.schemas.debrief import MetricsSchema, SelectionInSchema
from app.schemas.scenario import DEFAULT_IDEAL_CONFIDENCE, DEFAULT_OPTION_SCORE, ScenarioDocumentSchema
from app.services.branching import find_option, resolve_options
from app.services.errors import CONFIDENCE_OUT_OF_RANGE, CONFIDENCE_REQUIRED, ValidationError
from app.services.run_state import LockedDecision, ScenarioRun

MIN_SCORE = 0
MAX_SCORE = 100

# 1..5 confidence projected onto the 0..100 ideal_confidence scale
CONFIDENCE_SCALE_FACTOR = 20
CONFIDENCE_MIN = 1
CONFIDENCE_MAX = 5

# Reflection: 0..50 words ramps to 50, next 150 words ramp to 100
REFLECTION_BASE_WORDS = 50
REFLECTION_EXTRA_WORDS = 150

MISSION_WEIGHTS = {
    "decision_quality": 0.40,
    "confidence_alignment": 0.20,
    "reflection_quality": 0.15,
    "cri": 0.15,
    "bias_awareness": 0.10,
}


def clamp(value: float, low: float = MIN_SCORE, high: float = MAX_SCORE) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Nearest integer, .5 rounding up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def word_count(text: str | None) -> int:
    """Count whitespace-delimited non-empty tokens."""
    return len((text or "").split())


def is_valid_confidence(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and CONFIDENCE_MIN <= value <= CONFIDENCE_MAX


def confidence_alignment_for(confidence: int, ideal_confidence: float) -> float:
    return max(0.0, 100 - abs(confidence * CONFIDENCE_SCALE_FACTOR - ideal_confidence))


def reflection_quality_for(words: int) -> float:
    if words < REFLECTION_BASE_WORDS:
        return clamp(words / REFLECTION_BASE_WORDS * 50, 0, 50)
    return 50 + clamp(words - REFLECTION_BASE_WORDS, 0, REFLECTION_EXTRA_WORDS) / REFLECTION_EXTRA_WORDS * 50


@dataclass(frozen=True)
class RawMetrics:
    """Full-precision metrics; rounded only when exported."""

    decision_quality: float
    confidence_alignment: float
    reflection_quality: float
    cri: float
    bias_awareness: float
    trust_calibration: float
    information_advantage: float
    cognitive_adaptability: float
    escalation_tendency: float
    mission_score: int

    def rounded(self) -> MetricsSchema:
        return MetricsSchema(
            decision_quality=round_half_up(self.decision_quality),
            confidence_alignment=round_half_up(self.confidence_alignment),
            cri=round_half_up(self.cri),
            bias_awareness=round_half_up(self.bias_awareness),
            trust_calibration=round_half_up(self.trust_calibration),
            information_advantage=round_half_up(self.information_advantage),
            cognitive_adaptability=round_half_up(self.cognitive_adaptability),
            escalation_tendency=round_half_up(self.escalation_tendency),
            reflection_quality=round_half_up(self.reflection_quality),
            mission_score=self.mission_score,
        )


def _option_numbers(
    document: ScenarioDocumentSchema,
    decision: LockedDecision,
    prior_option_id: str | None,
) -> tuple[float, float]:
    """(score, ideal_confidence) for the chosen option, defaults if unresolvable."""
    if not 1 <= decision.decision_point <= len(document.decision_points):
        return DEFAULT_OPTION_SCORE, DEFAULT_IDEAL_CONFIDENCE
    point = document.decision_point(decision.decision_point)
    option = find_option(resolve_options(point, prior_option_id), decision.final_option_id)
    if option is None:
        return DEFAULT_OPTION_SCORE, DEFAULT_IDEAL_CONFIDENCE
    return option.score, option.ideal_confidence


def compute_raw_metrics(run: ScenarioRun, document: ScenarioDocumentSchema) -> RawMetrics:
    scores: list[float] = []
    alignments: list[float] = []
    for index in sorted(run.locked_decisions):
        decision = run.locked_decisions[index]
        prior = run.locked_decisions.get(index - 1)
        score, ideal = _option_numbers(document, decision, prior.final_option_id if prior else None)
        scores.append(score)
        alignments.append(confidence_alignment_for(decision.confidence, ideal))

    n = len(scores)
    decision_quality = sum(scores) / n if n else 0.0
    confidence_alignment = sum(alignments) / n if n else 0.0
    reflection_quality = reflection_quality_for(word_count(run.reflection_text))

    cri = clamp(min(100, 20 + 0.2 * decision_quality + 0.3 * reflection_quality + 30))
    bias_awareness = clamp(0.5 * reflection_quality + 0.2 * confidence_alignment)
    trust_calibration = clamp(0.35 * decision_quality + 0.35 * confidence_alignment)
    information_advantage = clamp(0.4 * decision_quality + 0.1 * reflection_quality)
    cognitive_adaptability = clamp(0.5 * cri + 0.2 * reflection_quality)
    escalation_tendency = clamp(100 - decision_quality)

    mission = (
        MISSION_WEIGHTS["decision_quality"] * decision_quality
        + MISSION_WEIGHTS["confidence_alignment"] * confidence_alignment
        + MISSION_WEIGHTS["reflection_quality"] * reflection_quality
        + MISSION_WEIGHTS["cri"] * cri
        + MISSION_WEIGHTS["bias_awareness"] * bias_awareness
    )
    return RawMetrics(
        decision_quality=decision_quality,
        confidence_alignment=confidence_alignment,
        reflection_quality=reflection_quality,
        cri=cri,
        bias_awareness=bias_awareness,
        trust_calibration=trust_calibration,
        information_advantage=information_advantage,
        cognitive_adaptability=cognitive_adaptability,
        escalation_tendency=escalation_tendency,
        mission_score=int(clamp(round_half_up(mission))),
    )


def compute_debrief(run: ScenarioRun, document: ScenarioDocumentSchema) -> MetricsSchema:
    """Score a run against its document; integers in [0, 100]."""
    return compute_raw_metrics(run, document).rounded()


def run_from_selections(
    scenario_id: str,
    selections: Mapping[int, SelectionInSchema],
    reflection_text: str,
    session_hint: str | None = None,
) -> ScenarioRun:
    """Build a scored-ready run from the stateless {1: {optionId, confidence}, ...} input."""
    run = ScenarioRun(scenario_id=scenario_id, session_hint=session_hint, reflection_text=reflection_text or "")
    for index in sorted(selections):
        if not 1 <= index <= 3:
            raise ValidationError("unknown decision point", f"Unknown decision point {index}.")
        sel = selections[index]
        if sel.confidence is None:
            raise ValidationError("confidence required", CONFIDENCE_REQUIRED)
        if not is_valid_confidence(sel.confidence):
            raise ValidationError("confidence out of range", CONFIDENCE_OUT_OF_RANGE)
        run.locked_decisions[index] = LockedDecision(
            decision_point=index,
            final_option_id=sel.option_id,
            confidence=sel.confidence,
            time_on_page_ms=0,
            sequence=(sel.option_id,),
        )
    return run
