import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response, status

from outreach.config import settings
from outreach.storage import init_db, close_db, check_db_health
from outreach.logging_utils import setup_logging, RequestLoggingMiddleware
from outreach.metrics import get_metrics, get_metrics_content_type
from outreach.routes import patients, templates
from outreach.schemas import HealthResponse


setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    - Startup: connect to the store and create the collections
    - Shutdown: release pooled connections
    """
    init_db()
    yield
    close_db()


app = FastAPI(
    title="Patient Outreach API",
    description="Message templates, patient registration and patient outcome lookups",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(templates.router)
app.include_router(patients.router)


# =============================================================================
# Health Check Routes
# =============================================================================

@app.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """Liveness probe - 200 once the app is running."""
    return HealthResponse(status="ok")


@app.get("/health/ready", response_model=HealthResponse)
async def health_ready(response: Response) -> HealthResponse:
    """
    Readiness probe - 200 only if AUTH_TOKEN is set and the store is
    reachable with every collection present; 503 otherwise.
    """
    if not settings.AUTH_TOKEN:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not_ready", reason="AUTH_TOKEN not configured")

    if not check_db_health():
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not_ready",
            reason="Database not reachable or schema not applied"
        )

    return HealthResponse(status="ready")


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus text exposition of request and outreach counters."""
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type()
    )
