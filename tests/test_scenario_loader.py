import json
from pathlib import Path

import pytest

from app.core.config import BASE_DIR
from app.schemas.scenario import FlatOptionsSchema, KeyedOptionsSchema
from app.services.errors import AuthoringError, ScenarioDocumentError, ScenarioNotFoundError
from app.services.scenario_loader import ScenarioRepository, normalize_document, normalize_option
from tests.helpers.documents import branching_raw, option


def test_option_defaults_are_resolved_once() -> None:
    opt = normalize_option({"id": "A", "text": "x"})

    assert opt.score == 50
    assert opt.ideal_confidence == 60


def test_option_aliases() -> None:
    opt = normalize_option({"optionId": 7, "label": "Seven", "idealConfidence": 20, "score": 90})

    assert opt.id == "7"
    assert opt.text == "Seven"
    assert opt.ideal_confidence == 20
    assert opt.score == 90


def test_option_scores_are_clamped() -> None:
    opt = normalize_option({"id": "A", "score": 140, "ideal_confidence": -5})

    assert opt.score == 100
    assert opt.ideal_confidence == 0


def test_option_without_id_is_rejected() -> None:
    with pytest.raises(ScenarioDocumentError):
        normalize_option({"text": "nameless"})


def test_branch_shapes_are_tagged_at_load() -> None:
    document = normalize_document(branching_raw())

    assert isinstance(document.decision_point(1).options, FlatOptionsSchema)
    dp2 = document.decision_point(2).options
    assert isinstance(dp2, KeyedOptionsSchema)
    assert list(dp2.by_prior_id) == ["A", "B"]
    assert dp2.default is None
    dp3 = document.decision_point(3).options
    assert [o.id for o in dp3.default] == ["X1", "X2"]
    assert "stem" not in dp3.by_prior_id


def test_bare_list_and_decision_points_array() -> None:
    raw = {
        "id": "ARR",
        "decision_points": [
            {"dp_index": 2, "options": [option("b")]},
            {"dp_index": 1, "prompt": "Start", "options": [option("a")]},
            {"dp_index": 3, "options": [option("c")]},
        ],
    }
    document = normalize_document(raw)

    assert [dp.index for dp in document.decision_points] == [1, 2, 3]
    assert document.decision_point(1).stem == "Start"
    assert document.decision_point(2).options.options[0].id == "b"

    bare = normalize_document({"id": "BARE", "dp1": [option("a")], "dp2": [option("b")], "dp3": [option("c")]})
    assert isinstance(bare.decision_point(3).options, FlatOptionsSchema)


def test_wrong_decision_point_count_is_rejected() -> None:
    raw = branching_raw()
    del raw["dp3"]

    with pytest.raises(ScenarioDocumentError):
        normalize_document(raw)


def test_document_errors_are_authoring_errors() -> None:
    with pytest.raises(AuthoringError):
        normalize_document(["not", "an", "object"])


def test_duplicate_option_ids_keep_first(caplog) -> None:
    raw = branching_raw()
    raw["dp1"]["options"].append(option("A", 0))

    with caplog.at_level("WARNING"):
        document = normalize_document(raw)
    options = document.decision_point(1).options.options
    assert [o.id for o in options] == ["A", "B"]
    assert options[0].score == 80
    assert "repeats option id" in caplog.text


def test_document_is_immutable() -> None:
    document = normalize_document(branching_raw())

    with pytest.raises(Exception):
        document.title = "changed"


def test_repository_loads_and_caches(tmp_path: Path) -> None:
    (tmp_path / "T-01.json").write_text(json.dumps(branching_raw()), encoding="utf-8")
    repo = ScenarioRepository(tmp_path)

    first = repo.get("T-01")
    assert first.id == "T-01"
    assert repo.get("T-01") is first
    assert repo.list_ids() == ["T-01"]


def test_repository_missing_and_path_like_ids(tmp_path: Path) -> None:
    repo = ScenarioRepository(tmp_path)

    with pytest.raises(ScenarioNotFoundError):
        repo.get("nope")
    with pytest.raises(ScenarioNotFoundError):
        repo.get("../secrets")


def test_repository_invalid_json(tmp_path: Path) -> None:
    (tmp_path / "BAD.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(ScenarioDocumentError):
        ScenarioRepository(tmp_path).get("BAD")


def test_bundled_scenario_loads() -> None:
    repo = ScenarioRepository(BASE_DIR / "data" / "scenarios")
    document = repo.get("HYB-01")

    assert document.title == "Harbour Blackout"
    assert document.module_id == "HYB"
    assert document.reflection_prompt
    assert document.pre_reflection_prompt


def test_repository_undecodable_file(tmp_path: Path) -> None:
    (tmp_path / "LATIN.json").write_bytes(b'{"id": "\xff\xfe"}')

    with pytest.raises(ScenarioDocumentError):
        ScenarioRepository(tmp_path).get("LATIN")


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_fall_back_to_defaults(value: float) -> None:
    opt = normalize_option({"id": "A", "score": value, "ideal_confidence": value})

    assert opt.score == 50
    assert opt.ideal_confidence == 60


def test_mixed_type_dp_index_is_a_document_error() -> None:
    raw = {
        "id": "MIX",
        "decision_points": [
            {"dp_index": "1", "options": [option("a")]},
            {"dp_index": 2, "options": [option("b")]},
            {"dp_index": 3, "options": [option("c")]},
        ],
    }

    with pytest.raises(ScenarioDocumentError):
        normalize_document(raw)


def test_repository_nan_literal_in_file(tmp_path: Path) -> None:
    raw = branching_raw()
    raw["dp1"]["options"][0]["score"] = float("nan")
    (tmp_path / "NAN.json").write_text(json.dumps(raw), encoding="utf-8")

    document = ScenarioRepository(tmp_path).get("NAN")
    assert document.decision_point(1).options.options[0].score == 50
