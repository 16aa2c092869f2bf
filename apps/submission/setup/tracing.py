"""OpenTelemetry Distributed Tracing Configuration for Submission API.

분산 트레이싱 설정:
- FastAPI 자동 계측 (HTTP 요청/응답)
- HTTPX 자동 계측 (reCAPTCHA, OpenAI 호출)

Architecture:
  Submission API (OTel SDK) -> OTLP/HTTP (4318) -> Jaeger Collector

opentelemetry 패키지는 `tracing` extra로 설치한다. 미설치 시 계측 없이 동작.
"""

import logging
import os

from fastapi import FastAPI

from submission.setup.constants import SERVICE_NAME, SERVICE_VERSION

logger = logging.getLogger(__name__)

OTEL_EXPORTER_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318")
OTEL_SAMPLING_RATE = float(os.getenv("OTEL_SAMPLING_RATE", "1.0"))

_tracer_provider = None


def configure_tracing(enabled: bool, environment: str) -> bool:
    """OpenTelemetry 트레이싱 설정.

    Returns:
        bool: 설정 성공 여부
    """
    global _tracer_provider

    if not enabled:
        logger.info("OpenTelemetry tracing disabled")
        return False

    try:
        from opentelemetry import trace
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
        from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
    except ImportError as e:
        logger.warning(f"OpenTelemetry not available: {e}")
        return False

    resource = Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": SERVICE_VERSION,
            "deployment.environment": environment,
        }
    )
    _tracer_provider = TracerProvider(
        resource=resource,
        sampler=TraceIdRatioBased(OTEL_SAMPLING_RATE),
    )
    _tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{OTEL_EXPORTER_ENDPOINT}/v1/traces"))
    )
    trace.set_tracer_provider(_tracer_provider)

    logger.info(
        "OpenTelemetry tracing configured",
        extra={"endpoint": OTEL_EXPORTER_ENDPOINT, "sampling_rate": OTEL_SAMPLING_RATE},
    )
    return True


def instrument_fastapi(app: FastAPI) -> None:
    """FastAPI 자동 계측."""
    if _tracer_provider is None:
        return

    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    except ImportError:
        logger.warning("FastAPIInstrumentor not available")
        return

    FastAPIInstrumentor.instrument_app(app, excluded_urls="health,ready,metrics")
    logger.info("FastAPI instrumentation enabled")


def instrument_httpx() -> None:
    """HTTPX 자동 계측 (captcha / OpenAI 호출 추적)."""
    if _tracer_provider is None:
        return

    try:
        from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
    except ImportError:
        logger.warning("HTTPXClientInstrumentor not available")
        return

    HTTPXClientInstrumentor().instrument()
    logger.info("HTTPX instrumentation enabled")


def shutdown_tracing() -> None:
    """트레이싱 종료."""
    global _tracer_provider

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        logger.info("OpenTelemetry tracing shutdown complete")
        _tracer_provider = None
