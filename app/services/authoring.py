"""Authoring checks for scenario content, reported rather than raised."""
import re
from typing import Any

from pydantic import BaseModel, Field

from app.schemas.scenario import FlatOptionsSchema, OptionSchema, ScenarioDocumentSchema
from app.services.errors import ScenarioDocumentError
from app.services.scenario_loader import normalize_document
from app.services.scoring import word_count

MIN_OPTIONS_PER_BRANCH = 2
OPTION_TEXT_WORDS = (12, 22)
REFLECTION_PROMPT_MIN_WORDS = 50

STOP_WORDS = {
    "the", "a", "an", "and", "or", "of", "in", "on", "for", "with", "to", "from", "by", "at", "is", "are",
    "was", "were", "be", "as", "that", "this", "these", "those", "it", "its", "into", "their", "your", "you",
    "we", "our", "they", "them",
}


class ValidationReport(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def _tokens(text: str | None) -> set[str]:
    return {t for t in re.split(r"[^a-z0-9]+", (text or "").lower()) if t and t not in STOP_WORDS}


def _branches(document: ScenarioDocumentSchema):
    for dp in document.decision_points:
        if isinstance(dp.options, FlatOptionsSchema):
            yield dp.index, "options", dp.options.options
            continue
        for key, options in dp.options.by_prior_id.items():
            yield dp.index, f"branch {key}", options
        if dp.options.default is not None:
            yield dp.index, "default", dp.options.default


def _check_option_text(dp_index: int, option: OptionSchema, warnings: list[str]) -> None:
    low, high = OPTION_TEXT_WORDS
    words = word_count(option.text)
    if words < low or words > high:
        warnings.append(f"dp {dp_index} option {option.id} text length {words} words (recommended {low}-{high})")


def validate_document(raw: Any) -> ValidationReport:
    """Check raw scenario JSON; structural failures are errors, style issues warnings."""
    try:
        document = normalize_document(raw)
    except ScenarioDocumentError as exc:
        return ValidationReport(valid=False, errors=[str(exc)])

    errors: list[str] = []
    warnings: list[str] = []

    for dp_index, label, options in _branches(document):
        if len(options) < MIN_OPTIONS_PER_BRANCH:
            errors.append(f"dp {dp_index} {label} must include at least {MIN_OPTIONS_PER_BRANCH} options")
        for option in options:
            _check_option_text(dp_index, option, warnings)

    prompt_words = word_count(document.reflection_prompt)
    if prompt_words < REFLECTION_PROMPT_MIN_WORDS:
        warnings.append(f"reflection prompt should be at least {REFLECTION_PROMPT_MIN_WORDS} words (found {prompt_words})")
    if document.scenario_lo:
        lo_tokens = {t for t in _tokens(document.scenario_lo) if len(t) > 3}
        if lo_tokens and not lo_tokens & _tokens(document.reflection_prompt):
            warnings.append("reflection prompt does not reference the learning outcome")

    return ValidationReport(valid=not errors, errors=errors, warnings=warnings)
