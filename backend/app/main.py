from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration

from .api.routes import errands as errands_routes
from .api.routes import itinerary as itinerary_routes
from .config import APP_VERSION, SERVICE_NAME
from .directions import get_directions_provider
from .logging_config import configure_structlog, get_logger
from .settings import settings
from .utils import add_cors, add_request_id_tracing

# Configure structured logging (must be done before any logging calls)
configure_structlog(json_logs=not settings.DEBUG)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        release=settings.SENTRY_RELEASE or f"{SERVICE_NAME}@dev",
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Only close a provider that was actually created.
    if get_directions_provider.cache_info().currsize:
        await get_directions_provider().aclose()
        get_directions_provider.cache_clear()
    logger.info("shutdown_complete")


app = FastAPI(
    title="Errand Router API",
    version=APP_VERSION,
    description="Multi-stop errand itineraries routed leg by leg",
    lifespan=lifespan,
)
add_cors(app)
add_request_id_tracing(app)

API_PREFIX = "/v1"

app.include_router(errands_routes.router, prefix=API_PREFIX)
app.include_router(itinerary_routes.router, prefix=API_PREFIX)


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": APP_VERSION,
        "directions_configured": bool(settings.GOOGLE_MAPS_API_KEY),
    }


@app.get("/", include_in_schema=False)
def root_redirect():
    return RedirectResponse(url="/docs", status_code=307)
