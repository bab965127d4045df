import json

from app.core.config import BASE_DIR
from app.services.authoring import validate_document
from tests.helpers.documents import branching_raw, option


def test_bundled_scenario_has_no_errors() -> None:
    raw = json.loads((BASE_DIR / "data" / "scenarios" / "HYB-01.json").read_text(encoding="utf-8"))
    report = validate_document(raw)

    assert report.valid
    assert report.errors == []
    assert report.warnings == []


def test_structural_failure_is_an_error() -> None:
    raw = branching_raw()
    del raw["dp2"]
    report = validate_document(raw)

    assert not report.valid
    assert "exactly 3 decision points" in report.errors[0]


def test_single_option_branch_is_an_error() -> None:
    raw = branching_raw()
    raw["dp2"]["B"] = [option("B1")]
    report = validate_document(raw)

    assert not report.valid
    assert report.errors == ["dp 2 branch B must include at least 2 options"]


def test_style_issues_are_warnings() -> None:
    report = validate_document(branching_raw())

    assert report.valid
    assert any("text length 2 words" in w for w in report.warnings)
    assert any("reflection prompt should be at least 50 words" in w for w in report.warnings)


def test_non_finite_score_is_reported_not_raised() -> None:
    raw = branching_raw()
    raw["dp1"]["options"][0]["score"] = float("nan")
    report = validate_document(raw)

    assert report.valid
    assert report.errors == []


def test_mixed_type_dp_index_is_an_error() -> None:
    raw = {
        "id": "MIX",
        "decision_points": [
            {"dp_index": "1", "options": [option("a"), option("b")]},
            {"dp_index": 2, "options": [option("c"), option("d")]},
            {"dp_index": 3, "options": [option("e"), option("f")]},
        ],
    }
    report = validate_document(raw)

    assert not report.valid
    assert "dp_index values must be integers" in report.errors[0]
