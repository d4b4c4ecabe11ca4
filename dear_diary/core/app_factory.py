"""Application factory helpers to keep dear_diary/main.py lightweight."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.middleware.trustedhost import TrustedHostMiddleware

from dear_diary.api.router import api_router
from dear_diary.core.config import settings
from dear_diary.core.database import get_db
from dear_diary.core.error_handlers import register_exception_handlers
from dear_diary.core.logging_config import setup_logging
from dear_diary.core.middleware.logging_middleware import LoggingMiddleware
from dear_diary.core.middleware.rate_limit import limiter
from dear_diary.core.monitoring import setup_monitoring

logger = logging.getLogger(__name__)


def _configure_app(app: FastAPI) -> None:
    allowed_hosts = settings.allowed_hosts or ["*"]
    if not (len(allowed_hosts) == 1 and allowed_hosts[0] == "*"):
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

    # Logs all requests and responses with timing
    app.add_middleware(LoggingMiddleware)

    origins = settings.cors_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)


def _register_routes(app: FastAPI) -> None:
    @app.get("/")
    async def root():
        return {"message": f"{settings.SITE_NAME} forum API"}

    # Liveness: is the process running?
    @app.get("/livez", tags=["Health"])
    async def livez():
        return {"status": "ok"}

    # Readiness: can we reach the database?
    @app.get("/readyz", tags=["Health"])
    def readyz(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Readiness check failed (Database): {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail={"database": "disconnected"},
            )
        return {"status": "ready", "details": {"database": "connected"}}


def _lifespan_factory():
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Forum service starting (environment=%s)", settings.environment)
        yield
        logger.info("Forum service stopped")

    return lifespan


def create_app() -> FastAPI:
    """
    Application Factory to create and configure the FastAPI application.
    Integrates Logging, Error Handling, Rate Limiting, and Middleware.
    """
    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        app_name="dear_diary",
        use_json=settings.use_json_logs,
        use_colors=settings.environment.lower() != "production",
    )

    app = FastAPI(
        title=f"{settings.SITE_NAME} Forum",
        description="Community forum with content moderation and ban lifecycle",
        version="1.0.0",
        lifespan=_lifespan_factory(),
        default_response_class=ORJSONResponse,
    )

    app.state.environment = settings.environment
    # RateLimitExceeded is rendered by register_exception_handlers
    app.state.limiter = limiter

    _configure_app(app)
    _register_routes(app)
    register_exception_handlers(app)
    setup_monitoring(app)

    logger.info("Application startup complete")
    return app


__all__ = ["create_app"]
