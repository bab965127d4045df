"""In-process registry of active decision trackers, keyed by run id.

Scored runs are kept only for the most recent `max_scored_runs`, so a finished
run can still be fetched for a while. The registry as a whole never holds more
than `max_runs` trackers; the oldest are evicted first.
"""
import logging
import uuid
from collections import OrderedDict

from app.schemas.scenario import ScenarioDocumentSchema
from app.services.errors import RunNotFoundError
from app.services.tracker import DecisionTracker

logger = logging.getLogger(__name__)

DEFAULT_MAX_RUNS = 10_000
DEFAULT_MAX_SCORED_RUNS = 100


class RunRegistry:
    def __init__(
        self,
        reflection_min_words: int,
        max_runs: int = DEFAULT_MAX_RUNS,
        max_scored_runs: int = DEFAULT_MAX_SCORED_RUNS,
    ):
        self.reflection_min_words = reflection_min_words
        self.max_runs = max_runs
        self.max_scored_runs = max_scored_runs
        self._runs: OrderedDict[str, DecisionTracker] = OrderedDict()

    def start(self, document: ScenarioDocumentSchema, session_hint: str | None = None) -> tuple[str, DecisionTracker]:
        self.prune()
        run_id = uuid.uuid4().hex
        tracker = DecisionTracker(document, session_hint=session_hint, reflection_min_words=self.reflection_min_words)
        self._runs[run_id] = tracker
        return run_id, tracker

    def get(self, run_id: str) -> DecisionTracker:
        tracker = self._runs.get(run_id)
        if tracker is None:
            raise RunNotFoundError(run_id)
        return tracker

    def prune(self) -> int:
        """Drop old scored runs, then the oldest runs beyond capacity; return how many went."""
        scored = [run_id for run_id, tracker in self._runs.items() if tracker.debrief is not None]
        evicted = scored[: max(0, len(scored) - self.max_scored_runs)]
        for run_id in evicted:
            del self._runs[run_id]
        # leave room for the run about to start
        while self._runs and len(self._runs) >= self.max_runs:
            run_id, _ = self._runs.popitem(last=False)
            evicted.append(run_id)
        if evicted:
            logger.debug("evicted %d runs from the registry", len(evicted))
        return len(evicted)

    def __len__(self) -> int:
        return len(self._runs)
