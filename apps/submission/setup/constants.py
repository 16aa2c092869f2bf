"""
Service Constants (Single Source of Truth)

정적 상수 정의 - 빌드 타임에 결정되며 환경변수로 변경되지 않음
"""

from __future__ import annotations

# ─────────────────────────────────────────────────────────────────────────────
# Service Identity
# ─────────────────────────────────────────────────────────────────────────────
SERVICE_NAME = "submission-api"
SERVICE_VERSION = "1.0.0"

# ─────────────────────────────────────────────────────────────────────────────
# Logging Constants
# ─────────────────────────────────────────────────────────────────────────────
ENV_KEY_ENVIRONMENT = "ENVIRONMENT"
ENV_KEY_LOG_LEVEL = "LOG_LEVEL"
ENV_KEY_LOG_FORMAT = "LOG_FORMAT"

DEFAULT_ENVIRONMENT = "dev"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"

ECS_VERSION = "8.11.0"

EXCLUDED_LOG_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)

NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "openai",
    "web3",
    "asyncio",
)

# ─────────────────────────────────────────────────────────────────────────────
# PII / Secret Masking
# ─────────────────────────────────────────────────────────────────────────────
SENSITIVE_FIELD_PATTERNS = frozenset(
    {"password", "secret", "token", "api_key", "private_key", "authorization"}
)
MASK_PLACEHOLDER = "***REDACTED***"
MASK_PRESERVE_PREFIX = 4
MASK_PRESERVE_SUFFIX = 4
MASK_MIN_LENGTH = 10

# ─────────────────────────────────────────────────────────────────────────────
# Submission Flow
# ─────────────────────────────────────────────────────────────────────────────
CAPTCHA_ACTION_SUBMIT_RECEIPT = "submit_receipt"
CAPTCHA_MIN_SCORE = 0.7
RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

# registerValidSubmission(address, 1000) 기본 보상량
DEFAULT_REWARD_AMOUNT = 1000

# 10 MiB
DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024

ADDRESS_LENGTH = 42

# ─────────────────────────────────────────────────────────────────────────────
# Prometheus Buckets
# ─────────────────────────────────────────────────────────────────────────────
BUCKETS_EXTERNAL_CALL: tuple[float, ...] = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
BUCKETS_REWARD_TX: tuple[float, ...] = (0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0)
