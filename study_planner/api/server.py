"""
FastAPI server for the study planner. Build with create_app(config), run with run_api_server(config).
Routes: GET / (liveness) and the planner API under /api/.
Docs: http://<host>:<port>/docs
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from study_planner.core.config import Config
from study_planner.core.store import StudentStore, get_store
from study_planner.planner.api import get_router
from study_planner.planner.errors import InvalidData, PlannerError
from study_planner.planner.notifications import ParentNotifier, get_notifier
from study_planner.planner.service import PlannerService

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "AI Study Planner backend is running ✅"


def create_app(
    config: Optional[Config] = None,
    store: Optional[StudentStore] = None,
    notifier: Optional[ParentNotifier] = None,
) -> FastAPI:
    """Create FastAPI app; store and notifier come from config unless given."""
    config = config or Config(data={})
    api_config = config.get_section("api")

    if store is None:
        store = get_store(config.get_section("storage"))
    if notifier is None:
        notifications_config = config.get_section("notifications")
        notifier = get_notifier(notifications_config.get("backend"), notifications_config)
    service = PlannerService(store, notifier)

    app = FastAPI(title="Study Planner API", description="Study schedules, tasks, marks and parent overview")
    app.state.service = service

    origins = api_config.get("cors_origins") or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PlannerError)
    async def handle_planner_error(request: Request, exc: PlannerError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug(f"Rejected request to {request.url.path}: {exc.errors()}")
        error = InvalidData()
        return JSONResponse(status_code=error.status_code, content={"error": error.message})

    @app.get("/", response_class=PlainTextResponse)
    def liveness() -> str:
        """Plain-text liveness check."""
        return LIVENESS_TEXT

    app.include_router(get_router(service), prefix="/api")

    return app


def run_api_server(config: Config, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """
    Serve the API with uvicorn (blocks).
    Reads api.host (default 0.0.0.0) and api.port (default 4000) unless overridden.
    """
    api_config = config.get_section("api")
    host = host or api_config.get("host", "0.0.0.0")
    port = int(port or api_config.get("port", 4000))
    fastapi_app = create_app(config)

    import uvicorn
    logger.info(f"Server running on http://{host}:{port} (docs at /docs)")
    uvicorn.run(fastapi_app, host=host, port=port, log_config=None)
