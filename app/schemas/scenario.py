"""Pydantic schemas for normalized scenario documents.

Documents are produced once by the scenario loader and are immutable from then
on. Option branches are a tagged union decided at load time, so consumers never
re-inspect the raw JSON shape.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_OPTION_SCORE = 50
DEFAULT_IDEAL_CONFIDENCE = 60


class OptionSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    score: float = Field(default=DEFAULT_OPTION_SCORE, ge=0, le=100)
    ideal_confidence: float = Field(default=DEFAULT_IDEAL_CONFIDENCE, ge=0, le=100)


class FlatOptionsSchema(BaseModel):
    """One ordered option list regardless of earlier choices."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["flat"] = "flat"
    options: tuple[OptionSchema, ...] = ()


class KeyedOptionsSchema(BaseModel):
    """Option lists keyed by the option chosen at the preceding decision point."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["keyed"] = "keyed"
    by_prior_id: dict[str, tuple[OptionSchema, ...]] = Field(default_factory=dict)
    default: tuple[OptionSchema, ...] | None = None


OptionSet = Annotated[Union[FlatOptionsSchema, KeyedOptionsSchema], Field(discriminator="kind")]


class DecisionPointSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1, le=3)
    narrative: str = ""
    stem: str = ""
    options: OptionSet


class ScenarioDocumentSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    narrative: str = ""
    decision_points: tuple[DecisionPointSchema, ...] = Field(min_length=3, max_length=3)
    reflection_prompt: str = ""
    pre_reflection_prompt: str = ""
    scenario_lo: str | None = None
    module_id: str | None = None

    def decision_point(self, index: int) -> DecisionPointSchema:
        """Return the decision point with the given 1-based index."""
        return self.decision_points[index - 1]
