"""In-memory state of one scenario attempt: traces, locked decisions, run."""
from dataclasses import dataclass, field
from enum import Enum


class DecisionPointState(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    LOCKED = "locked"


class RunState(str, Enum):
    IN_PROGRESS = "in_progress"
    READY_TO_SCORE = "ready_to_score"
    SCORED = "scored"


@dataclass
class SelectionTrace:
    """Interaction trace for the active decision point; frozen on lock."""

    sequence: list[str] = field(default_factory=list)
    change_count: int = 0
    confidence_change_count: int = 0
    first_selection_at: int | None = None
    final_selection_at: int | None = None
    # pending answer, not yet authoritative
    option_id: str | None = None
    confidence: int | None = None
    started_at: int | None = None
    time_on_page_ms: int = 0

    def record_selection(self, option_id: str, now: int | None) -> None:
        if not self.sequence or self.sequence[-1] != option_id:
            self.sequence.append(option_id)
            if len(self.sequence) == 1:
                self.first_selection_at = now
        self.change_count = max(0, len(self.sequence) - 1)
        self.option_id = option_id


@dataclass(frozen=True)
class LockedDecision:
    decision_point: int
    final_option_id: str
    confidence: int
    time_on_page_ms: int
    sequence: tuple[str, ...] = ()
    change_count: int = 0
    confidence_change_count: int = 0
    first_selection_at: int | None = None
    final_selection_at: int | None = None

    def to_details(self) -> dict:
        """Bookkeeping fields stored alongside the persisted decision."""
        return {
            "selection_sequence": list(self.sequence),
            "change_count": self.change_count,
            "confidence_change_count": self.confidence_change_count,
            "timestamps": {
                "first_selection": self.first_selection_at,
                "final_selection": self.final_selection_at,
            },
            "is_final": True,
            "step": self.decision_point,
        }


@dataclass
class ScenarioRun:
    scenario_id: str
    session_hint: str | None = None
    locked_decisions: dict[int, LockedDecision] = field(default_factory=dict)
    reflection_text: str = ""
