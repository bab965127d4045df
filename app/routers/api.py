"""API routes: scenarios, runs, stateless scoring, certificates, reports."""
import json
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Request, Response

from app.schemas.debrief import ComputeDebriefInSchema, ComputeDebriefOutSchema, DebriefSchema
from app.schemas.run import (
    CertificateInSchema,
    CertificateOutSchema,
    ConfidenceSchema,
    DecisionPointViewSchema,
    DecisionRecordSchema,
    LockedDecisionSchema,
    ReflectionSchema,
    RunOutSchema,
    SelectOptionSchema,
    StartRunSchema,
)
from app.schemas.scenario import ScenarioDocumentSchema
from app.services.authoring import ValidationReport, validate_document
from app.services.debrief import assemble_debrief
from app.services.events import DebriefComputed, ReflectionSubmitted
from app.services.persistence import EventPublisher, ScenarioStore
from app.services.registry import RunRegistry
from app.services.run_state import DecisionPointState
from app.services.scenario_loader import ScenarioRepository
from app.services.scoring import compute_debrief, run_from_selections
from app.services.tracker import DecisionTracker

router = APIRouter(prefix="/api", tags=["api"])


# ---------- dependencies ----------

def get_scenarios(request: Request) -> ScenarioRepository:
    return request.app.state.scenarios


def get_registry(request: Request) -> RunRegistry:
    return request.app.state.runs


def get_store(request: Request) -> ScenarioStore:
    return request.app.state.store


def get_publisher(request: Request) -> EventPublisher:
    return request.app.state.publisher


Scenarios = Annotated[ScenarioRepository, Depends(get_scenarios)]
Registry = Annotated[RunRegistry, Depends(get_registry)]
Store = Annotated[ScenarioStore, Depends(get_store)]
Publisher = Annotated[EventPublisher, Depends(get_publisher)]


def _run_view(run_id: str, tracker: DecisionTracker) -> RunOutSchema:
    points = []
    for point in tracker.document.decision_points:
        state = tracker.states[point.index]
        trace = tracker.trace(point.index)
        view = DecisionPointViewSchema(index=point.index, state=state.value)
        if state is not DecisionPointState.PENDING:
            view = DecisionPointViewSchema(
                index=point.index,
                state=state.value,
                narrative=point.narrative,
                stem=point.stem,
                options=list(tracker.visible_options(point.index)),
                selected_option_id=trace.option_id,
                confidence=trace.confidence,
                sequence=list(trace.sequence),
                change_count=trace.change_count,
                confidence_change_count=trace.confidence_change_count,
            )
        points.append(view)

    return RunOutSchema(
        run_id=run_id,
        scenario_id=tracker.run.scenario_id,
        session_hint=tracker.run.session_hint,
        state=tracker.state.value,
        active_decision_point=tracker.active_index,
        decision_points=points,
        locked_decisions=[
            LockedDecisionSchema.model_validate(tracker.run.locked_decisions[i])
            for i in sorted(tracker.run.locked_decisions)
        ],
        reflection_word_count=tracker.reflection_word_count,
        reflection_min_words=tracker.reflection_min_words,
        debrief=tracker.debrief,
    )


def _flush_events(tracker: DecisionTracker, publisher: EventPublisher, background_tasks: BackgroundTasks) -> None:
    events = tracker.pop_events()
    if events:
        background_tasks.add_task(publisher.publish, events)


# ---------- scenarios ----------

@router.get("/scenarios", response_model=list[str])
async def list_scenarios(scenarios: Scenarios):
    """List ids of available scenario documents."""
    return scenarios.list_ids()


@router.get("/scenarios/{scenario_id}", response_model=ScenarioDocumentSchema)
async def get_scenario(scenario_id: str, scenarios: Scenarios):
    """Get one normalized scenario document by id."""
    return scenarios.get(scenario_id)


# ---------- runs ----------

@router.post("/runs", response_model=RunOutSchema, status_code=201)
async def start_run(body: StartRunSchema, scenarios: Scenarios, registry: Registry):
    document = scenarios.get(body.scenario_id)
    run_id, tracker = registry.start(document, session_hint=body.session_hint)
    return _run_view(run_id, tracker)


@router.get("/runs/{run_id}", response_model=RunOutSchema)
async def get_run(run_id: str, registry: Registry):
    return _run_view(run_id, registry.get(run_id))


@router.post("/runs/{run_id}/decision-points/{dp_index}/select", response_model=RunOutSchema)
async def select_option(run_id: str, dp_index: int, body: SelectOptionSchema, registry: Registry):
    tracker = registry.get(run_id)
    tracker.select_option(dp_index, body.option_id)
    return _run_view(run_id, tracker)


@router.post("/runs/{run_id}/decision-points/{dp_index}/confidence", response_model=RunOutSchema)
async def set_confidence(run_id: str, dp_index: int, body: ConfidenceSchema, registry: Registry):
    tracker = registry.get(run_id)
    tracker.set_confidence(dp_index, body.confidence)
    return _run_view(run_id, tracker)


@router.post("/runs/{run_id}/decision-points/{dp_index}/lock", response_model=RunOutSchema)
async def lock_decision(
    run_id: str,
    dp_index: int,
    registry: Registry,
    publisher: Publisher,
    background_tasks: BackgroundTasks,
):
    """Lock the decision point; persistence happens after the response."""
    tracker = registry.get(run_id)
    tracker.lock_and_advance(dp_index)
    _flush_events(tracker, publisher, background_tasks)
    return _run_view(run_id, tracker)


@router.put("/runs/{run_id}/reflection", response_model=RunOutSchema)
async def update_reflection(run_id: str, body: ReflectionSchema, registry: Registry):
    tracker = registry.get(run_id)
    tracker.set_reflection(body.text)
    return _run_view(run_id, tracker)


@router.post("/runs/{run_id}/pre-reflection", status_code=202)
async def submit_pre_reflection(
    run_id: str,
    body: ReflectionSchema,
    registry: Registry,
    publisher: Publisher,
    background_tasks: BackgroundTasks,
):
    tracker = registry.get(run_id)
    tracker.submit_pre_reflection(body.text)
    _flush_events(tracker, publisher, background_tasks)
    return {"accepted": True}


@router.post("/runs/{run_id}/submit", response_model=DebriefSchema)
async def submit_run(
    run_id: str,
    registry: Registry,
    publisher: Publisher,
    background_tasks: BackgroundTasks,
    body: ReflectionSchema | None = None,
):
    """Score the run. An optional body replaces the reflection text first."""
    tracker = registry.get(run_id)
    if body is not None and tracker.debrief is None:
        tracker.set_reflection(body.text)
    debrief = tracker.submit()
    _flush_events(tracker, publisher, background_tasks)
    registry.prune()
    return debrief


# ---------- stateless scoring ----------

@router.post("/compute-debrief", response_model=ComputeDebriefOutSchema)
async def compute_debrief_endpoint(
    body: ComputeDebriefInSchema,
    scenarios: Scenarios,
    publisher: Publisher,
    background_tasks: BackgroundTasks,
):
    """Score {selections, reflection_text} against a scenario without a tracked run."""
    document = scenarios.get(body.scenario_id)
    run = run_from_selections(document.id, body.selections, body.reflection_text, session_hint=body.session_hint)
    debrief = assemble_debrief(compute_debrief(run, document))
    # anonymous scoring is not stored
    if body.session_hint:
        background_tasks.add_task(
            publisher.publish,
            [
                ReflectionSubmitted(body.session_hint, document.id, "post", run.reflection_text),
                DebriefComputed(body.session_hint, document.id, debrief),
            ],
        )
    return ComputeDebriefOutSchema(**debrief.metrics.model_dump(), short_feedback=debrief.short_feedback)


# ---------- certificates ----------

@router.post("/certificates")
async def issue_certificate(body: CertificateInSchema, store: Store):
    certificate, artifact = await store.issue_certificate(body.session_hint, body.module_id)
    return Response(
        content=artifact,
        media_type="text/plain; charset=utf-8",
        headers={
            "X-Certificate-Code": certificate.code,
            "Content-Disposition": f'attachment; filename="certificate-{certificate.code}.txt"',
        },
    )


def _certificate_view(certificate) -> CertificateOutSchema:
    if certificate is None:
        raise HTTPException(status_code=404, detail="Certificate not found")
    return CertificateOutSchema(
        code=certificate.code,
        module_id=certificate.module_id,
        session_hint=certificate.session_hint,
        revoked=certificate.revoked,
        revoked_at=certificate.revoked_at,
        valid=not certificate.revoked,
    )


@router.get("/certificates/{code}", response_model=CertificateOutSchema)
async def verify_certificate(code: str, store: Store):
    return _certificate_view(await store.verify_certificate(code))


# ---------- reports / admin ----------

@router.get("/report/decisions", response_model=list[DecisionRecordSchema])
async def report_decisions(store: Store, session_hint: str | None = None, scenario_id: str | None = None):
    rows = await store.list_decisions(session_hint=session_hint, scenario_id=scenario_id)
    return [
        DecisionRecordSchema(
            id=row.id,
            session_hint=row.session_hint,
            scenario_id=row.scenario_id,
            decision_point=row.decision_point,
            selected_option_id=row.selected_option_id,
            confidence=row.confidence,
            time_on_page_ms=row.time_on_page_ms,
            details=json.loads(row.details_json),
        )
        for row in rows
    ]


@router.post("/admin/certificates/{code}/revoke", response_model=CertificateOutSchema)
async def revoke_certificate(code: str, store: Store):
    """Revoke a certificate so verification reports it invalid."""
    return _certificate_view(await store.revoke_certificate(code))


@router.post("/admin/validate-scenario", response_model=ValidationReport)
async def validate_scenario(payload: Annotated[Any, Body()]):
    """Run authoring checks over a raw scenario JSON payload."""
    return validate_document(payload)
