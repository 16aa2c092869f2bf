"""Submission API Main Application.

분산 트레이싱 통합 (OTEL_ENABLED=true):
- FastAPI 자동 계측 (HTTP 요청/응답)
- HTTPX 자동 계측 (reCAPTCHA, OpenAI 호출)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from submission.infrastructure.messaging import close_async_cache_client
from submission.presentation.http.controllers import health_router, submission_router
from submission.presentation.http.errors.handlers import register_exception_handlers
from submission.setup.config import get_settings
from submission.setup.dependencies import close_dependencies
from submission.setup.logging import configure_logging
from submission.setup.metrics import register_metrics
from submission.setup.tracing import (
    configure_tracing,
    instrument_fastapi,
    instrument_httpx,
    shutdown_tracing,
)

settings = get_settings()

configure_logging(service_name=settings.service_name, service_version=settings.service_version)
logger = logging.getLogger(__name__)

# OpenTelemetry 분산 트레이싱 설정
configure_tracing(enabled=settings.otel_enabled, environment=settings.environment)
instrument_httpx()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI 라이프스팬 이벤트."""
    logger.info(f"Starting {settings.service_name} v{settings.service_version}")
    yield
    logger.info(f"Shutting down {settings.service_name}")
    await close_dependencies()
    await close_async_cache_client()
    shutdown_tracing()


def create_app() -> FastAPI:
    """FastAPI 애플리케이션 생성."""
    app = FastAPI(
        title="EcoEarn Submission API",
        description="Receipt validation and on-chain reward pipeline",
        version=settings.service_version,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, include_stack=not settings.is_production)
    register_metrics(app)

    # OpenTelemetry FastAPI instrumentation
    instrument_fastapi(app)

    # Routers
    app.include_router(health_router)
    app.include_router(submission_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
