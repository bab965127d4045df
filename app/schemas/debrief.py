"""Pydantic schemas for scoring input and the computed debrief."""
from pydantic import BaseModel, ConfigDict, Field


class MetricsSchema(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    decision_quality: int = Field(ge=0, le=100)
    confidence_alignment: int = Field(ge=0, le=100)
    cri: int = Field(ge=0, le=100, alias="CRI")
    bias_awareness: int = Field(ge=0, le=100)
    trust_calibration: int = Field(ge=0, le=100)
    information_advantage: int = Field(ge=0, le=100)
    cognitive_adaptability: int = Field(ge=0, le=100)
    escalation_tendency: int = Field(ge=0, le=100)
    reflection_quality: int = Field(ge=0, le=100)
    mission_score: int = Field(ge=0, le=100)


class ShortFeedbackSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    line1: str
    line2: str


class DebriefSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    metrics: MetricsSchema
    short_feedback: ShortFeedbackSchema


class SelectionInSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    option_id: str = Field(alias="optionId")
    confidence: int | None = None


class ComputeDebriefInSchema(BaseModel):
    scenario_id: str
    session_hint: str | None = None
    selections: dict[int, SelectionInSchema] = Field(default_factory=dict)
    reflection_text: str = ""


class ComputeDebriefOutSchema(BaseModel):
    """Flat response shape of the stateless scoring endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    decision_quality: int
    confidence_alignment: int
    cri: int = Field(alias="CRI")
    bias_awareness: int
    trust_calibration: int
    information_advantage: int
    cognitive_adaptability: int
    escalation_tendency: int
    reflection_quality: int
    mission_score: int
    short_feedback: ShortFeedbackSchema
