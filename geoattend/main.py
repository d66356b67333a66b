"""
GeoAttend: application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `services/`, `api/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from geoattend.api.v1.api import api_router
from geoattend.api.v1.endpoints.auth import limiter
from geoattend.core.config import settings
from geoattend.core.exceptions import register_exception_handlers
from geoattend.db.base import Base
from geoattend.db.session import engine

# Ensure all models are imported so metadata.create_all can see them
from geoattend.models.attendance import Attendance  # noqa: F401
from geoattend.models.task import Task, TaskAssignment  # noqa: F401
from geoattend.models.user import User  # noqa: F401
from geoattend.models.wfh_request import WFHRequest  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")
    logger.info(
        "Office geofence: (%.6f, %.6f) radius %.0f m",
        settings.OFFICE_LATITUDE,
        settings.OFFICE_LONGITUDE,
        settings.OFFICE_RADIUS_METERS,
    )
    logger.info("GeoAttend v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Geofenced employee attendance with WFH approvals and task review",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting (login / refresh)
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("geoattend.main:app", host="0.0.0.0", port=8000)
