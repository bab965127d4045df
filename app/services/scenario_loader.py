"""Scenario document loading and normalization.

Raw content JSON comes in several historical shapes (dp1/dp2/dp3 keys or a
decision_points array; flat option lists, {options: [...]} objects, or objects
keyed by the prior option id with an optional `default`). Everything is folded
into ScenarioDocumentSchema here, once, with numeric option defaults filled in.
"""
import json
import logging
import math
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.schemas.scenario import (
    DEFAULT_IDEAL_CONFIDENCE,
    DEFAULT_OPTION_SCORE,
    DecisionPointSchema,
    FlatOptionsSchema,
    KeyedOptionsSchema,
    OptionSchema,
    ScenarioDocumentSchema,
)
from app.services.errors import ScenarioDocumentError, ScenarioNotFoundError

logger = logging.getLogger(__name__)

DECISION_POINT_COUNT = 3

# keys of a keyed decision point object that are never branches
_DP_META_KEYS = {"narrative", "stem", "prompt", "options", "default", "dp_index", "index"}


def _first(raw: dict, *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _number(value: Any, default: float, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        logger.warning("authoring error: %s %s is not a finite number, using %s", label, value, default)
        return default
    if value < 0 or value > 100:
        logger.warning("authoring error: %s %s outside 0..100, clamped", label, value)
        return float(max(0, min(100, value)))
    return float(value)


def normalize_option(raw: Any) -> OptionSchema:
    if not isinstance(raw, dict):
        raise ScenarioDocumentError(f"Option must be an object, got {type(raw).__name__}")
    option_id = _first(raw, "id", "option_id", "optionId")
    if option_id is None or str(option_id) == "":
        raise ScenarioDocumentError(f"Option without id: {raw!r}")
    option_id = str(option_id)
    try:
        return OptionSchema(
            id=option_id,
            text=str(_first(raw, "text", "label", "title", "name") or ""),
            score=_number(raw.get("score"), DEFAULT_OPTION_SCORE, f"option {option_id} score"),
            ideal_confidence=_number(
                _first(raw, "ideal_confidence", "idealConfidence"),
                DEFAULT_IDEAL_CONFIDENCE,
                f"option {option_id} ideal_confidence",
            ),
        )
    except PydanticValidationError as exc:
        raise ScenarioDocumentError(f"Option {option_id} is invalid: {exc}") from exc


def normalize_option_list(raw: Any, where: str) -> tuple[OptionSchema, ...]:
    if not isinstance(raw, list):
        raise ScenarioDocumentError(f"{where}: options must be a list")
    options: list[OptionSchema] = []
    seen: set[str] = set()
    for item in raw:
        opt = normalize_option(item)
        if opt.id in seen:
            logger.warning("authoring error: %s repeats option id %r, keeping the first", where, opt.id)
            continue
        seen.add(opt.id)
        options.append(opt)
    return tuple(options)


def normalize_decision_point(raw: Any, index: int) -> DecisionPointSchema:
    where = f"decision point {index}"
    if isinstance(raw, list):
        return DecisionPointSchema(index=index, options=FlatOptionsSchema(options=normalize_option_list(raw, where)))
    if not isinstance(raw, dict):
        raise ScenarioDocumentError(f"{where} is missing or malformed")

    narrative = str(raw.get("narrative") or "")
    stem = str(_first(raw, "stem", "prompt") or "")

    if isinstance(raw.get("options"), list):
        option_set = FlatOptionsSchema(options=normalize_option_list(raw["options"], where))
    else:
        branches = {
            str(key): normalize_option_list(value, f"{where} branch {key}")
            for key, value in raw.items()
            if key not in _DP_META_KEYS and isinstance(value, list)
        }
        default = raw.get("default")
        option_set = KeyedOptionsSchema(
            by_prior_id=branches,
            default=normalize_option_list(default, f"{where} default") if isinstance(default, list) else None,
        )
        if not any(branches.values()) and not option_set.default:
            logger.warning("authoring error: %s defines no options in any branch", where)

    if isinstance(option_set, FlatOptionsSchema) and not option_set.options:
        logger.warning("authoring error: %s defines no options", where)
    return DecisionPointSchema(index=index, narrative=narrative, stem=stem, options=option_set)


def _raw_decision_points(raw: dict) -> list[Any]:
    if isinstance(raw.get("decision_points"), list):
        points = raw["decision_points"]
        if all(isinstance(p, dict) and p.get("dp_index") is not None for p in points):
            indexes = [p["dp_index"] for p in points]
            if any(isinstance(i, bool) or not isinstance(i, int) for i in indexes):
                raise ScenarioDocumentError(f"dp_index values must be integers, got {indexes!r}")
            points = sorted(points, key=lambda p: p["dp_index"])
        return points
    return [raw[key] for key in ("dp1", "dp2", "dp3") if raw.get(key) is not None]


def normalize_document(raw: Any, scenario_id: str | None = None) -> ScenarioDocumentSchema:
    """Build an immutable ScenarioDocumentSchema from raw content JSON."""
    if not isinstance(raw, dict):
        raise ScenarioDocumentError("Scenario document must be a JSON object")

    doc_id = _first(raw, "scenario_id", "id") or scenario_id
    if not doc_id:
        raise ScenarioDocumentError("Scenario document has no id")

    raw_points = _raw_decision_points(raw)
    if len(raw_points) != DECISION_POINT_COUNT:
        raise ScenarioDocumentError(
            f"Scenario {doc_id} must define exactly {DECISION_POINT_COUNT} decision points, found {len(raw_points)}"
        )

    try:
        points = tuple(normalize_decision_point(p, i) for i, p in enumerate(raw_points, start=1))
        return ScenarioDocumentSchema(
            id=str(doc_id),
            title=str(raw.get("title") or ""),
            narrative=str(_first(raw, "narrative", "intro") or ""),
            decision_points=points,
            reflection_prompt=str(_first(raw, "reflection_prompt", "reflection2_prompt") or ""),
            pre_reflection_prompt=str(_first(raw, "pre_reflection_prompt", "reflection1_prompt") or ""),
            scenario_lo=raw.get("scenario_lo"),
            module_id=_first(raw, "module_id", "moduleId"),
        )
    except PydanticValidationError as exc:
        raise ScenarioDocumentError(f"Scenario {doc_id} is invalid: {exc}") from exc


class ScenarioRepository:
    """Loads scenario documents from <directory>/<scenario_id>.json, once per id."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self._cache: dict[str, ScenarioDocumentSchema] = {}

    def _path_for(self, scenario_id: str) -> Path:
        # ids are file stems; anything path-like is rejected
        if not scenario_id or Path(scenario_id).name != scenario_id or scenario_id.startswith("."):
            raise ScenarioNotFoundError(scenario_id)
        return self.directory / f"{scenario_id}.json"

    def load_raw(self, scenario_id: str) -> Any:
        path = self._path_for(scenario_id)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ScenarioNotFoundError(scenario_id) from exc
        except UnicodeDecodeError as exc:
            raise ScenarioDocumentError(f"{path} is not valid UTF-8: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ScenarioDocumentError(f"Invalid JSON in {path}: {exc}") from exc

    def get(self, scenario_id: str) -> ScenarioDocumentSchema:
        """Return the normalized document or raise ScenarioNotFoundError."""
        document = self._cache.get(scenario_id)
        if document is None:
            document = normalize_document(self.load_raw(scenario_id), scenario_id=scenario_id)
            self._cache[scenario_id] = document
            logger.info("loaded scenario %s", scenario_id)
        return document

    def list_ids(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))
