# backend/helpdesk/main.py
"""
FastAPI application for the staff presence backend.

Run locally with:
    uvicorn helpdesk.main:app --reload
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.constants import API_TITLE, API_VERSION, BRAND_NAME
from .core.exceptions import DomainException
from .database import SessionLocal, init_db
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import presence as presence_v1
from .services.presence_catalog_service import PresenceCatalogService
from .services.presence_registry import get_presence_registry

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _seed_presence_catalog() -> None:
    db = SessionLocal()
    try:
        PresenceCatalogService(db, get_presence_registry()).seed_defaults()
    finally:
        db.close()


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} presence API starting up...")
    logger.info(f"Environment: {settings.environment}, default timezone: {settings.app_tz}")

    if settings.presence_seed_on_startup:
        init_db()
        _seed_presence_catalog()

    yield

    logger.info(f"{BRAND_NAME} presence API shutting down...")


app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Domain errors that escape a route keep their status and envelope."""
    http_exc = exc.to_http_exception()
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(presence_v1.router, prefix="/presence")
app.include_router(api_v1)


@app.get("/health")
async def health() -> dict:
    return {"status": "healthy", "service": f"{BRAND_NAME.lower()}-presence"}


@app.get("/metrics/prometheus", include_in_schema=False)
async def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
