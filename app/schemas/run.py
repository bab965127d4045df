"""Pydantic schemas for the scenario run API."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.schemas.debrief import DebriefSchema
from app.schemas.scenario import OptionSchema


class StartRunSchema(BaseModel):
    scenario_id: str
    session_hint: str | None = None


class SelectOptionSchema(BaseModel):
    option_id: str


class ConfidenceSchema(BaseModel):
    confidence: int


class ReflectionSchema(BaseModel):
    text: str = ""


class LockedDecisionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    decision_point: int
    final_option_id: str
    confidence: int
    time_on_page_ms: int
    sequence: list[str]
    change_count: int
    confidence_change_count: int
    first_selection_at: int | None = None
    final_selection_at: int | None = None


class DecisionPointViewSchema(BaseModel):
    index: int
    state: str
    narrative: str = ""
    stem: str = ""
    options: list[OptionSchema] = []
    selected_option_id: str | None = None
    confidence: int | None = None
    sequence: list[str] = []
    change_count: int = 0
    confidence_change_count: int = 0


class RunOutSchema(BaseModel):
    run_id: str
    scenario_id: str
    session_hint: str | None = None
    state: str
    active_decision_point: int | None = None
    decision_points: list[DecisionPointViewSchema]
    locked_decisions: list[LockedDecisionSchema]
    reflection_word_count: int = 0
    reflection_min_words: int
    debrief: DebriefSchema | None = None


class DecisionRecordSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_hint: str | None = None
    scenario_id: str
    decision_point: int
    selected_option_id: str
    confidence: int
    time_on_page_ms: int
    details: dict


class CertificateInSchema(BaseModel):
    session_hint: str | None = None
    module_id: str


class CertificateOutSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    module_id: str
    session_hint: str | None = None
    revoked: bool = False
    revoked_at: datetime | None = None
    valid: bool = True
