import json

import pytest
import pytest_asyncio

from app.db.base import Base
from app.db.session import make_engine, make_session_factory
from app.services.debrief import assemble_debrief
from app.services.errors import PersistenceWarning
from app.services.events import DebriefComputed, DecisionLocked, ReflectionSubmitted
from app.services.persistence import EventPublisher, ScenarioStore
from app.services.run_state import LockedDecision
from tests.helpers.documents import words
from tests.test_debrief import _metrics


@pytest_asyncio.fixture
async def store(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield ScenarioStore(make_session_factory(engine))
    await engine.dispose()


def _decision(dp: int = 1) -> LockedDecision:
    return LockedDecision(
        decision_point=dp,
        final_option_id="A",
        confidence=4,
        time_on_page_ms=1200,
        sequence=("B", "A"),
        change_count=1,
        confidence_change_count=2,
        first_selection_at=10,
        final_selection_at=20,
    )


class FailingStore:
    def __init__(self):
        self.calls = 0

    async def persist_locked_decision(self, *args):
        self.calls += 1
        raise RuntimeError("db down")

    async def persist_reflection(self, *args):
        self.calls += 1
        raise RuntimeError("db down")

    async def persist_debrief(self, *args):
        self.calls += 1
        raise RuntimeError("db down")


@pytest.mark.asyncio
async def test_locked_decision_round_trips_details(store: ScenarioStore) -> None:
    await store.persist_locked_decision("sess", "HYB-01", _decision())
    rows = await store.list_decisions(session_hint="sess", scenario_id="HYB-01")

    assert len(rows) == 1
    assert rows[0].selected_option_id == "A"
    assert rows[0].time_on_page_ms == 1200
    details = json.loads(rows[0].details_json)
    assert details["selection_sequence"] == ["B", "A"]
    assert details["confidence_change_count"] == 2
    assert details["timestamps"] == {"first_selection": 10, "final_selection": 20}
    assert await store.list_decisions(session_hint="other") == []


@pytest.mark.asyncio
async def test_reflection_stores_word_count(store: ScenarioStore) -> None:
    row = await store.persist_reflection("sess", "HYB-01", "post", words(57))

    assert row.word_count == 57
    assert row.phase == "post"


@pytest.mark.asyncio
async def test_debrief_columns(store: ScenarioStore) -> None:
    row = await store.persist_debrief("sess", "HYB-01", assemble_debrief(_metrics(68)))

    assert row.mission_score == 68
    assert row.cri == 78
    assert json.loads(row.short_feedback_json)["line2"].startswith("Decision Quality 60")


@pytest.mark.asyncio
async def test_certificate_issue_and_verify(store: ScenarioStore) -> None:
    certificate, artifact = await store.issue_certificate("sess", "HYB")

    assert certificate.code.encode() in artifact
    assert b"Module: HYB" in artifact
    found = await store.verify_certificate(certificate.code.lower())
    assert found is not None and found.module_id == "HYB"
    assert await store.verify_certificate("0000") is None


@pytest.mark.asyncio
async def test_publisher_persists_events_in_order(store: ScenarioStore) -> None:
    publisher = EventPublisher(store)
    stored = await publisher.publish(
        [
            DecisionLocked("sess", "HYB-01", _decision(1)),
            DecisionLocked("sess", "HYB-01", _decision(2)),
            ReflectionSubmitted("sess", "HYB-01", "post", words(60)),
            DebriefComputed("sess", "HYB-01", assemble_debrief(_metrics(68))),
        ]
    )

    assert stored == 4
    assert [r.decision_point for r in await store.list_decisions()] == [1, 2]


@pytest.mark.asyncio
async def test_publisher_failures_warn_not_raise() -> None:
    failing = FailingStore()
    publisher = EventPublisher(failing)

    with pytest.warns(PersistenceWarning) as caught:
        stored = await publisher.publish(
            [
                DecisionLocked(None, "HYB-01", _decision()),
                ReflectionSubmitted(None, "HYB-01", "pre", "x"),
                DebriefComputed(None, "HYB-01", assemble_debrief(_metrics(10))),
            ]
        )

    record = [w for w in caught if issubclass(w.category, PersistenceWarning)]
    assert stored == 0
    assert failing.calls == 3
    assert [str(w.message).split(" for ")[0] for w in record] == [
        "failed to persist DecisionLocked",
        "failed to persist ReflectionSubmitted",
        "failed to persist DebriefComputed",
    ]
    assert "db down" in str(record[0].message)


@pytest.mark.asyncio
async def test_certificate_revocation(store: ScenarioStore) -> None:
    certificate, _ = await store.issue_certificate("sess", "HYB")
    assert certificate.revoked is False

    revoked = await store.revoke_certificate(certificate.code.lower())
    assert revoked.revoked is True
    assert revoked.revoked_at is not None

    again = await store.revoke_certificate(certificate.code)
    assert again.revoked_at == revoked.revoked_at
    assert (await store.verify_certificate(certificate.code)).revoked is True
    assert await store.revoke_certificate("0000") is None
