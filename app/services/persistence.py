"""Outbound persistence: the SQL store and the best-effort event publisher."""
import json
import logging
import secrets
import warnings
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.certificate import Certificate
from app.models.debrief import Debrief
from app.models.decision import Decision
from app.models.reflection import Reflection
from app.schemas.debrief import DebriefSchema
from app.services.errors import PersistenceWarning
from app.services.events import (
    DebriefComputed,
    DecisionLocked,
    ReflectionPhase,
    ReflectionSubmitted,
    ScenarioEvent,
)
from app.services.run_state import LockedDecision
from app.services.scoring import word_count

logger = logging.getLogger(__name__)


class ScenarioStore:
    """SQLAlchemy-backed store; constructed with a session factory, never global."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def persist_locked_decision(
        self, session_hint: str | None, scenario_id: str, decision: LockedDecision
    ) -> Decision:
        row = Decision(
            session_hint=session_hint,
            scenario_id=scenario_id,
            decision_point=decision.decision_point,
            selected_option_id=decision.final_option_id,
            confidence=decision.confidence,
            time_on_page_ms=decision.time_on_page_ms,
            details_json=json.dumps(decision.to_details()),
        )
        async with self.session_factory() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
        return row

    async def persist_reflection(
        self, session_hint: str | None, scenario_id: str, phase: ReflectionPhase, text: str
    ) -> Reflection:
        row = Reflection(
            session_hint=session_hint,
            scenario_id=scenario_id,
            phase=phase,
            text=text,
            word_count=word_count(text),
        )
        async with self.session_factory() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
        return row

    async def persist_debrief(self, session_hint: str | None, scenario_id: str, debrief: DebriefSchema) -> Debrief:
        m = debrief.metrics
        row = Debrief(
            session_hint=session_hint,
            scenario_id=scenario_id,
            mission_score=m.mission_score,
            decision_quality=m.decision_quality,
            confidence_alignment=m.confidence_alignment,
            cri=m.cri,
            bias_awareness=m.bias_awareness,
            trust_calibration=m.trust_calibration,
            information_advantage=m.information_advantage,
            cognitive_adaptability=m.cognitive_adaptability,
            escalation_tendency=m.escalation_tendency,
            reflection_quality=m.reflection_quality,
            short_feedback_json=debrief.short_feedback.model_dump_json(),
        )
        async with self.session_factory() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
        return row

    async def list_decisions(self, session_hint: str | None = None, scenario_id: str | None = None) -> list[Decision]:
        query = select(Decision).order_by(Decision.id.asc())
        if session_hint is not None:
            query = query.where(Decision.session_hint == session_hint)
        if scenario_id is not None:
            query = query.where(Decision.scenario_id == scenario_id)
        async with self.session_factory() as db:
            result = await db.execute(query)
            return list(result.scalars().all())

    async def issue_certificate(self, session_hint: str | None, module_id: str) -> tuple[Certificate, bytes]:
        """Record a certificate and return it with a plain-text artifact."""
        row = Certificate(code=secrets.token_hex(8).upper(), session_hint=session_hint, module_id=module_id)
        async with self.session_factory() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
        issued = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        artifact = (
            "CERTIFICATE OF COMPLETION\n"
            f"Module: {module_id}\n"
            f"Issued: {issued}\n"
            f"Verification code: {row.code}\n"
        ).encode("utf-8")
        return row, artifact

    async def verify_certificate(self, code: str) -> Certificate | None:
        async with self.session_factory() as db:
            result = await db.execute(select(Certificate).where(Certificate.code == code.upper()))
            return result.scalar_one_or_none()

    async def revoke_certificate(self, code: str) -> Certificate | None:
        """Mark a certificate revoked; revoking twice keeps the first timestamp."""
        async with self.session_factory() as db:
            result = await db.execute(select(Certificate).where(Certificate.code == code.upper()))
            row = result.scalar_one_or_none()
            if row is None:
                return None
            if not row.revoked:
                row.revoked = True
                row.revoked_at = datetime.now(timezone.utc)
                await db.commit()
                await db.refresh(row)
                logger.info("revoked certificate %s", row.code)
        return row


class EventPublisher:
    """Sends tracker events to the store; failures become PersistenceWarnings, never errors."""

    def __init__(self, store: ScenarioStore):
        self.store = store

    async def publish(self, events: list[ScenarioEvent]) -> int:
        """Persist events in order; return how many were stored."""
        stored = 0
        for event in events:
            try:
                await self._dispatch(event)
            except Exception as exc:  # noqa: BLE001
                logger.debug("persisting %s failed", type(event).__name__, exc_info=True)
                warnings.warn(
                    f"failed to persist {type(event).__name__} for {event.scenario_id}: {exc}",
                    PersistenceWarning,
                    stacklevel=2,
                )
                continue
            stored += 1
        return stored

    async def _dispatch(self, event: ScenarioEvent) -> None:
        if isinstance(event, DecisionLocked):
            await self.store.persist_locked_decision(event.session_hint, event.scenario_id, event.decision)
        elif isinstance(event, ReflectionSubmitted):
            await self.store.persist_reflection(event.session_hint, event.scenario_id, event.phase, event.text)
        elif isinstance(event, DebriefComputed):
            await self.store.persist_debrief(event.session_hint, event.scenario_id, event.debrief)
        else:
            raise TypeError(f"Unknown event {event!r}")
