"""Scenario Debrief Trainer - FastAPI app entry point."""
import logging
import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.db.base import Base
from app.db.session import make_engine, make_session_factory
from app.routers import api
from app.services.errors import (
    PersistenceWarning,
    RunNotFoundError,
    ScenarioDocumentError,
    ScenarioNotFoundError,
    ValidationError,
)
from app.services.persistence import EventPublisher, ScenarioStore
from app.services.registry import RunRegistry
from app.services.scenario_loader import ScenarioRepository

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # persistence failures reach the log through py.warnings, every occurrence
    logging.captureWarnings(True)
    warnings.simplefilter("always", PersistenceWarning)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("serving scenarios from %s", settings.scenarios_dir)
        yield
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Branching scenario decisions with a computed performance debrief",
        lifespan=lifespan,
        debug=settings.debug,
    )

    store = ScenarioStore(make_session_factory(engine))
    app.state.settings = settings
    app.state.scenarios = ScenarioRepository(settings.scenarios_dir)
    app.state.runs = RunRegistry(
        reflection_min_words=settings.reflection_min_words,
        max_runs=settings.max_runs,
        max_scored_runs=settings.max_scored_runs,
    )
    app.state.store = store
    app.state.publisher = EventPublisher(store)

    app.include_router(api.router)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": exc.message, "code": exc.code})

    @app.exception_handler(ScenarioNotFoundError)
    async def scenario_not_found_handler(request: Request, exc: ScenarioNotFoundError):
        return JSONResponse(status_code=404, content={"detail": "Scenario not found"})

    @app.exception_handler(RunNotFoundError)
    async def run_not_found_handler(request: Request, exc: RunNotFoundError):
        return JSONResponse(status_code=404, content={"detail": "Run not found"})

    @app.exception_handler(ScenarioDocumentError)
    async def scenario_document_handler(request: Request, exc: ScenarioDocumentError):
        logger.error("authoring error: %s", exc)
        return JSONResponse(status_code=422, content={"detail": "Scenario content is invalid"})

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
