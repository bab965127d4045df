from __future__ import annotations

from app.schemas.scenario import ScenarioDocumentSchema
from app.services.scenario_loader import normalize_document


def option(option_id: str, score: float | None = None, ideal: float | None = None) -> dict:
    raw: dict = {"id": option_id, "text": f"Option {option_id}"}
    if score is not None:
        raw["score"] = score
    if ideal is not None:
        raw["ideal_confidence"] = ideal
    return raw


def branching_raw() -> dict:
    """Three decision points; dp2 keyed on dp1, dp3 keyed on dp2 with a default."""
    return {
        "scenario_id": "T-01",
        "title": "Test scenario",
        "reflection_prompt": "Reflect.",
        "dp1": {"stem": "First", "options": [option("A", 80, 80), option("B", 20, 40)]},
        "dp2": {
            "stem": "Second",
            "A": [option("A1", 60, 60), option("A2", 30)],
            "B": [option("B1", 50), option("B2", 10)],
        },
        "dp3": {
            "stem": "Third",
            "A1": [option("A1a", 40, 40), option("A1b", 90)],
            "default": [option("X1", 70), option("X2")],
        },
    }


def branching_document() -> ScenarioDocumentSchema:
    return normalize_document(branching_raw())


def words(count: int) -> str:
    return " ".join(f"word{i}" for i in range(count))


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int | None = 1_000_000):
        self.now = start

    def __call__(self) -> int | None:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms
