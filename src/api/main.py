"""Caffeine Social Club moderation API: FastAPI application."""
from __future__ import annotations

import logging

from src.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.db.engine import async_session, engine, get_session
from src.db.tables import Base
from src.services.errors import (
    InvalidTransitionError,
    ModerationError,
    NotFoundError,
    StorageError,
    StorageTimeoutError,
    ValidationError,
)
from src.services.moderation import ModerationService

VERSION = "0.1.0"

# ── Sentry Error Tracking ────────────────────────
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        send_default_pii=False,
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate config, create tables, build the moderation service."""
    from src.startup_checks import validate_settings
    validate_settings()

    # Register moderation tables with Base.metadata
    import src.db.moderation_tables  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

    app.state.moderation = ModerationService(async_session, timeout=settings.STORAGE_TIMEOUT_SECONDS)

    yield

    logger.info("Shutting down: draining connections...")
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Caffeine Social Club Moderation API",
    version=VERSION,
    description="Reports, blocking and feed visibility for Caffeine Social Club",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID tracing
from src.middleware.request_id import RequestIDMiddleware
app.add_middleware(RequestIDMiddleware)


from src.api.reports import router as reports_router
app.include_router(reports_router)

from src.api.blocks import router as blocks_router
app.include_router(blocks_router)

from src.api.feed import router as feed_router
app.include_router(feed_router)


@app.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    """Deep health check: validates DB connectivity."""
    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.exception("Health check could not reach the database")
        db_status = "error"
    status = "ok" if db_status == "connected" else "degraded"
    return {"status": status, "db": db_status, "version": VERSION}


@app.get("/ready")
async def readiness(session: AsyncSession = Depends(get_session)):
    """Readiness probe for orchestrators. Returns 503 if not ready to serve traffic."""
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Readiness check could not reach the database")
        return JSONResponse(status_code=503, content={"ready": False, "reason": "database unavailable"})
    return {"ready": True}


# --- Structured Error Responses ---

from fastapi import Request as FastAPIRequest
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

# Most specific class first
_ERROR_STATUS: list[tuple[type[ModerationError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (StorageTimeoutError, 504),
    (StorageError, 503),
]


@app.exception_handler(ModerationError)
async def moderation_error_handler(request: FastAPIRequest, exc: ModerationError):
    """Surface moderation failures verbatim: category plus cause."""
    status_code = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 400)
    if isinstance(exc, StorageError):
        logger.error("Moderation storage failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={
        "error": exc.kind,
        "message": exc.user_message(),
    })


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: FastAPIRequest, exc: RequestValidationError):
    """Return clean, structured validation errors instead of raw Pydantic output."""
    errors = []
    for err in exc.errors():
        field = " → ".join(str(loc) for loc in err["loc"]) if err.get("loc") else "unknown"
        errors.append({"field": field, "message": err["msg"]})
    return JSONResponse(status_code=422, content={
        "error": "validation_error",
        "message": "Invalid request data",
        "details": errors,
    })


@app.exception_handler(HTTPException)
async def http_error_handler(request: FastAPIRequest, exc: HTTPException):
    """Consistent error envelope for all HTTP errors."""
    return JSONResponse(status_code=exc.status_code, content={
        "error": exc.detail if isinstance(exc.detail, str) else "error",
        "message": exc.detail,
    })


@app.exception_handler(Exception)
async def unhandled_error_handler(request: FastAPIRequest, exc: Exception):
    """Catch-all for unhandled exceptions: never leak stack traces."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={
        "error": "internal_error",
        "message": "Something went wrong. Please try again.",
    })
