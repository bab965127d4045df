"""Domain events emitted by the decision tracker for the outbound store."""
from dataclasses import dataclass
from typing import Literal, Union

from app.schemas.debrief import DebriefSchema
from app.services.run_state import LockedDecision

ReflectionPhase = Literal["pre", "post"]


@dataclass(frozen=True)
class DecisionLocked:
    session_hint: str | None
    scenario_id: str
    decision: LockedDecision


@dataclass(frozen=True)
class ReflectionSubmitted:
    session_hint: str | None
    scenario_id: str
    phase: ReflectionPhase
    text: str


@dataclass(frozen=True)
class DebriefComputed:
    session_hint: str | None
    scenario_id: str
    debrief: DebriefSchema


ScenarioEvent = Union[DecisionLocked, ReflectionSubmitted, DebriefComputed]
