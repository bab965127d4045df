"""Decision tracker: the per-run state machine over three decision points.

Decision points move PENDING -> ACTIVE -> LOCKED strictly in order 1 -> 2 -> 3.
Actions on a LOCKED decision point are ignored; actions on a PENDING one are
rejected. The tracker has a single writer and does no locking of its own.
Side effects leave as events (see pop_events).
"""
import logging
import time
from typing import Callable

from app.schemas.debrief import DebriefSchema
from app.schemas.scenario import OptionSchema, ScenarioDocumentSchema
from app.services.branching import find_option, resolve_options
from app.services.debrief import assemble_debrief
from app.services.errors import (
    CONFIDENCE_OUT_OF_RANGE,
    CONFIDENCE_REQUIRED,
    REFLECTION_TOO_SHORT,
    SELECTION_REQUIRED,
    ValidationError,
)
from app.services.events import DebriefComputed, DecisionLocked, ReflectionSubmitted, ScenarioEvent
from app.services.run_state import (
    DecisionPointState,
    LockedDecision,
    RunState,
    ScenarioRun,
    SelectionTrace,
)
from app.services.scoring import compute_debrief, is_valid_confidence, word_count

logger = logging.getLogger(__name__)

DECISION_POINTS = (1, 2, 3)
DEFAULT_REFLECTION_MIN_WORDS = 50

Clock = Callable[[], int | None]


def system_clock() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


class DecisionTracker:
    def __init__(
        self,
        document: ScenarioDocumentSchema,
        session_hint: str | None = None,
        clock: Clock = system_clock,
        reflection_min_words: int = DEFAULT_REFLECTION_MIN_WORDS,
    ):
        self.document = document
        self.clock = clock
        self.reflection_min_words = reflection_min_words
        self.run = ScenarioRun(scenario_id=document.id, session_hint=session_hint)
        self.states: dict[int, DecisionPointState] = {i: DecisionPointState.PENDING for i in DECISION_POINTS}
        self.traces: dict[int, SelectionTrace] = {}
        self.debrief: DebriefSchema | None = None
        self._events: list[ScenarioEvent] = []
        self._activate(1)

    # ---------- helpers ----------

    def _now(self) -> int | None:
        return self.clock()

    def _activate(self, dp_index: int) -> None:
        self.states[dp_index] = DecisionPointState.ACTIVE
        self.traces[dp_index] = SelectionTrace(started_at=self._now())

    def _elapsed(self, trace: SelectionTrace) -> int:
        now = self._now()
        if now is None or trace.started_at is None:
            return 0
        return max(0, now - trace.started_at)

    def _check_index(self, dp_index: int) -> None:
        if dp_index not in self.states:
            raise ValidationError("unknown decision point", f"Unknown decision point {dp_index}.")

    def _active_trace(self, dp_index: int) -> SelectionTrace | None:
        """Trace for an ACTIVE decision point; None when LOCKED (ignored action)."""
        self._check_index(dp_index)
        state = self.states[dp_index]
        if state is DecisionPointState.LOCKED:
            logger.debug("ignoring action on locked decision point %s", dp_index)
            return None
        if state is DecisionPointState.PENDING:
            raise ValidationError(
                "decision point not active",
                f"Decision point {dp_index} is not available yet.",
            )
        return self.traces[dp_index]

    # ---------- queries ----------

    @property
    def state(self) -> RunState:
        if self.debrief is not None:
            return RunState.SCORED
        if self.all_locked and self.reflection_word_count >= self.reflection_min_words:
            return RunState.READY_TO_SCORE
        return RunState.IN_PROGRESS

    @property
    def all_locked(self) -> bool:
        return all(self.states[i] is DecisionPointState.LOCKED for i in DECISION_POINTS)

    @property
    def active_index(self) -> int | None:
        for i in DECISION_POINTS:
            if self.states[i] is DecisionPointState.ACTIVE:
                return i
        return None

    @property
    def reflection_word_count(self) -> int:
        return word_count(self.run.reflection_text)

    def prior_option_id(self, dp_index: int) -> str | None:
        prior = self.run.locked_decisions.get(dp_index - 1)
        return prior.final_option_id if prior else None

    def visible_options(self, dp_index: int) -> tuple[OptionSchema, ...]:
        self._check_index(dp_index)
        return resolve_options(self.document.decision_point(dp_index), self.prior_option_id(dp_index))

    def trace(self, dp_index: int) -> SelectionTrace | None:
        return self.traces.get(dp_index)

    def pop_events(self) -> list[ScenarioEvent]:
        events, self._events = self._events, []
        return events

    # ---------- transitions ----------

    def select_option(self, dp_index: int, option_id: str) -> None:
        trace = self._active_trace(dp_index)
        if trace is None:
            return
        if find_option(self.visible_options(dp_index), option_id) is None:
            raise ValidationError("unknown option", f"Option {option_id!r} is not available here.")
        trace.record_selection(option_id, self._now())
        trace.time_on_page_ms = self._elapsed(trace)

    def set_confidence(self, dp_index: int, value: int) -> None:
        trace = self._active_trace(dp_index)
        if trace is None:
            return
        if not is_valid_confidence(value):
            raise ValidationError("confidence out of range", CONFIDENCE_OUT_OF_RANGE)
        trace.confidence = value
        trace.confidence_change_count += 1
        trace.time_on_page_ms = self._elapsed(trace)

    def lock_and_advance(self, dp_index: int) -> LockedDecision:
        """Freeze the active decision point and activate the next one.

        Locking an already locked decision point returns the existing record.
        """
        self._check_index(dp_index)
        if self.states[dp_index] is DecisionPointState.LOCKED:
            return self.run.locked_decisions[dp_index]
        trace = self._active_trace(dp_index)

        if trace.option_id is None:
            raise ValidationError("selection required", SELECTION_REQUIRED)
        if trace.confidence is None:
            raise ValidationError("confidence required", CONFIDENCE_REQUIRED)
        if not is_valid_confidence(trace.confidence):
            raise ValidationError("confidence out of range", CONFIDENCE_OUT_OF_RANGE)

        trace.final_selection_at = self._now()
        decision = LockedDecision(
            decision_point=dp_index,
            final_option_id=trace.option_id,
            confidence=trace.confidence,
            time_on_page_ms=trace.time_on_page_ms,
            sequence=tuple(trace.sequence),
            change_count=trace.change_count,
            confidence_change_count=trace.confidence_change_count,
            first_selection_at=trace.first_selection_at,
            final_selection_at=trace.final_selection_at,
        )
        self.run.locked_decisions[dp_index] = decision
        self.states[dp_index] = DecisionPointState.LOCKED
        if dp_index < DECISION_POINTS[-1]:
            self._activate(dp_index + 1)

        self._events.append(DecisionLocked(self.run.session_hint, self.run.scenario_id, decision))
        logger.info(
            "locked decision point %s of %s: option=%s confidence=%s",
            dp_index,
            self.run.scenario_id,
            decision.final_option_id,
            decision.confidence,
        )
        return decision

    def set_reflection(self, text: str) -> None:
        if self.debrief is not None:
            raise ValidationError("scenario already submitted", "This scenario has already been submitted.")
        self.run.reflection_text = text or ""

    def submit_pre_reflection(self, text: str) -> None:
        """Record the pre-scenario reflection; it does not affect scoring."""
        self._events.append(ReflectionSubmitted(self.run.session_hint, self.run.scenario_id, "pre", text or ""))

    def submit(self) -> DebriefSchema:
        """Score the run once all decisions are locked and the reflection is long enough."""
        if self.debrief is not None:
            return self.debrief
        if not self.all_locked:
            raise ValidationError("decisions incomplete", "Please lock all three decisions before submitting.")
        if self.reflection_word_count < self.reflection_min_words:
            raise ValidationError(
                "reflection too short",
                REFLECTION_TOO_SHORT.format(min_words=self.reflection_min_words),
            )

        self.debrief = assemble_debrief(compute_debrief(self.run, self.document))
        self._events.append(
            ReflectionSubmitted(self.run.session_hint, self.run.scenario_id, "post", self.run.reflection_text)
        )
        self._events.append(DebriefComputed(self.run.session_hint, self.run.scenario_id, self.debrief))
        logger.info("scored %s: mission_score=%s", self.run.scenario_id, self.debrief.metrics.mission_score)
        return self.debrief
