"""Video abuse moderation API — FastAPI application."""
from __future__ import annotations

import logging

from src.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.api.video_abuses import router as video_abuses_router
from src.db.engine import engine, get_session
from src.db.tables import Base
from src.errors import VideoAbuseError
from src.middleware.request_id import RequestIDMiddleware

logger = logging.getLogger(__name__)


def _init_sentry() -> None:
    """Error tracking, only when SENTRY_DSN is configured."""
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

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
    logger.info("Sentry enabled (%s)", settings.SENTRY_ENVIRONMENT)


if settings.SENTRY_DSN:
    _init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    from src.startup_checks import validate_settings
    validate_settings()

    # Registers VideoAbuseRow with Base.metadata
    import src.db.abuse_tables  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Video abuse tables ready")

    yield

    await engine.dispose()
    logger.info("Database connections closed")


app = FastAPI(
    title="Video Abuse Moderation API",
    version="0.1.0",
    description="Search and summarize abuse reports filed against videos",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)
app.include_router(video_abuses_router)


@app.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    """Liveness plus a round trip to the database."""
    await session.execute(text("SELECT 1"))
    return {"status": "ok"}


# ── Error envelope: {"error": ..., "message": ...} ──

def _error(status_code: int, error: str, message, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message, **extra})


@app.exception_handler(RequestValidationError)
async def on_request_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(loc) for loc in err["loc"]) if err.get("loc") else "unknown",
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return _error(422, "validation_error", "Invalid request parameters", details=details)


@app.exception_handler(HTTPException)
async def on_http_error(request: Request, exc: HTTPException):
    error = exc.detail if isinstance(exc.detail, str) else "error"
    return _error(exc.status_code, error, exc.detail)


@app.exception_handler(VideoAbuseError)
async def on_video_abuse_error(request: Request, exc: VideoAbuseError):
    """Integrity gaps, deleted videos and rejected writes keep their own status."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail)
    return _error(exc.status_code, type(exc).__name__, exc.detail)


@app.exception_handler(SQLAlchemyError)
async def on_store_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error(503, "store_error", "The database is unavailable. Please try again.")


@app.exception_handler(Exception)
async def on_unhandled_error(request: Request, exc: Exception):
    """Never leak stack traces."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "Something went wrong. Please try again.")
