"""Submission 도메인 Prometheus 메트릭"""

import time
from collections.abc import Generator
from contextlib import contextmanager

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from submission.setup.constants import BUCKETS_EXTERNAL_CALL, BUCKETS_REWARD_TX

REGISTRY = CollectorRegistry(auto_describe=True)
METRICS_PATH = "/metrics/status"


def register_metrics(app: FastAPI) -> None:
    """Prometheus /metrics 엔드포인트 등록"""

    @app.get(METRICS_PATH, include_in_schema=False)
    async def metrics_endpoint() -> Response:
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


# ─────────────────────────────────────────────────────────────────────────────
# Submission 파이프라인 비즈니스 메트릭
# ─────────────────────────────────────────────────────────────────────────────

PIPELINE_STAGE_LATENCY = Histogram(
    "submission_pipeline_stage_duration_seconds",
    "Duration of each stage in the receipt submission pipeline",
    labelnames=["stage"],  # quota, classification, reward
    registry=REGISTRY,
    buckets=BUCKETS_REWARD_TX,
)

SUBMISSION_OUTCOME_COUNTER = Counter(
    "submission_outcome_total",
    "Total count of receipt submissions by final outcome",
    # rewarded, reward_failed, rejected, quota_exceeded, validation_error, idempotent_hit, in_progress
    labelnames=["outcome"],
    registry=REGISTRY,
)

CAPTCHA_VERIFICATION_COUNTER = Counter(
    "submission_captcha_verification_total",
    "Total count of captcha verifications",
    labelnames=["result"],  # passed, failed, skipped
    registry=REGISTRY,
)

LEDGER_CALL_LATENCY = Histogram(
    "submission_ledger_call_duration_seconds",
    "Duration of ledger contract calls",
    labelnames=["method"],
    registry=REGISTRY,
    buckets=BUCKETS_EXTERNAL_CALL,
)

LEDGER_CALL_COUNTER = Counter(
    "submission_ledger_call_total",
    "Total count of ledger contract calls",
    labelnames=["method", "status"],
    registry=REGISTRY,
)


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions
# ─────────────────────────────────────────────────────────────────────────────


@contextmanager
def track_stage(stage: str) -> Generator[None, None, None]:
    """파이프라인 단계 소요 시간 추적.

    Usage:
        with track_stage("classification"):
            verdict = await validator.validate(image)
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        PIPELINE_STAGE_LATENCY.labels(stage=stage).observe(time.perf_counter() - start_time)


def track_outcome(outcome: str) -> None:
    """최종 결과 추적."""
    SUBMISSION_OUTCOME_COUNTER.labels(outcome=outcome).inc()


def track_captcha(result: str) -> None:
    """captcha 검증 결과 추적."""
    CAPTCHA_VERIFICATION_COUNTER.labels(result=result).inc()


@contextmanager
def track_ledger_call(method: str) -> Generator[None, None, None]:
    """컨트랙트 호출 추적 (성공/실패 + 소요 시간)."""
    start_time = time.perf_counter()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        LEDGER_CALL_LATENCY.labels(method=method).observe(time.perf_counter() - start_time)
        LEDGER_CALL_COUNTER.labels(method=method, status=status).inc()
