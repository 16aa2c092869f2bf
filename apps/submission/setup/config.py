"""Submission Service Configuration.

외부화 원칙:
- 자주 바뀌는 정책(보상량, captcha 임계값, CORS) → env/ConfigMap
- 외부 서비스 주소 → env (로컬은 localhost, prod는 실제 노드/엔드포인트)
- API Key, 서명 키 → SecretStr (로깅 마스킹)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from submission.setup.constants import (
    CAPTCHA_ACTION_SUBMIT_RECEIPT,
    CAPTCHA_MIN_SCORE,
    DEFAULT_MAX_IMAGE_BYTES,
    DEFAULT_REWARD_AMOUNT,
    RECAPTCHA_VERIFY_URL,
    SERVICE_NAME,
    SERVICE_VERSION,
)

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


class Settings(BaseSettings):
    """Submission Service 설정.

    운영 환경에서는 반드시 env로 주입할 것.
    """

    # === Service Identity ===
    service_name: str = Field(SERVICE_NAME, description="Service name")
    service_version: str = Field(SERVICE_VERSION, description="Service version")
    environment: str = Field(
        "dev",
        validation_alias=AliasChoices("SUBMISSION_ENVIRONMENT", "ENVIRONMENT"),
        description="Environment (dev, staging, prod)",
    )

    # === Classification (OpenAI) ===
    openai_api_key: SecretStr = Field(
        ...,
        validation_alias=AliasChoices("OPENAI_API_KEY", "SUBMISSION_OPENAI_API_KEY"),
        description="OpenAI API key",
    )
    openai_model: str = Field("gpt-4o", description="Vision model used to judge receipts")
    openai_max_tokens: int = Field(350, ge=16, le=4096, description="Completion token limit")
    classifier_timeout_seconds: float = Field(
        30.0,
        ge=1.0,
        le=120.0,
        description="Timeout for a single classification call (seconds)",
    )

    # === Captcha (reCAPTCHA v3) ===
    captcha_enabled: bool = Field(True, description="Require captcha before the pipeline runs")
    recaptcha_secret_key: SecretStr | None = Field(
        None,
        validation_alias=AliasChoices("RECAPTCHA_SECRET_KEY", "SUBMISSION_RECAPTCHA_SECRET_KEY"),
        description="reCAPTCHA server-side secret",
    )
    recaptcha_verify_url: str = Field(RECAPTCHA_VERIFY_URL, description="Verification endpoint")
    captcha_expected_action: str = Field(
        CAPTCHA_ACTION_SUBMIT_RECEIPT,
        description="Action label the client must report",
    )
    captcha_min_score: float = Field(
        CAPTCHA_MIN_SCORE,
        ge=0.0,
        le=1.0,
        description="Minimum accepted reCAPTCHA score",
    )
    captcha_timeout_seconds: float = Field(5.0, ge=0.1, le=30.0)

    # === Ledger (EcoEarn contract) ===
    ledger_rpc_url: str = Field(
        "http://localhost:8669",
        validation_alias=AliasChoices("NETWORK_URL", "SUBMISSION_LEDGER_RPC_URL"),
        description="JSON-RPC endpoint of the ledger node. prod에서는 env 필수.",
    )
    ecoearn_contract_address: str = Field(
        "",
        validation_alias=AliasChoices(
            "ECOEARN_CONTRACT_ADDRESS", "SUBMISSION_ECOEARN_CONTRACT_ADDRESS"
        ),
        description="Deployed EcoEarn contract address",
    )
    admin_private_key: SecretStr | None = Field(
        None,
        validation_alias=AliasChoices("ADMIN_PRIVATE_KEY", "SUBMISSION_ADMIN_PRIVATE_KEY"),
        description="Distributor key that signs reward transactions",
    )
    reward_amount: int = Field(
        DEFAULT_REWARD_AMOUNT,
        gt=0,
        validation_alias=AliasChoices("REWARD_AMOUNT", "SUBMISSION_REWARD_AMOUNT"),
        description="Fixed amount passed to registerValidSubmission",
    )
    ledger_call_timeout_seconds: float = Field(10.0, ge=0.5, le=60.0)
    ledger_receipt_timeout_seconds: float = Field(
        120.0,
        ge=1.0,
        le=600.0,
        description="Upper bound on waiting for the reward transaction receipt",
    )

    # === Image ===
    max_image_bytes: int = Field(DEFAULT_MAX_IMAGE_BYTES, ge=1024)

    # === Redis (idempotency) ===
    redis_cache_url: str = Field(
        "redis://localhost:6379/1",
        validation_alias=AliasChoices("REDIS_CACHE_URL", "SUBMISSION_REDIS_CACHE_URL"),
    )
    idempotency_ttl: int = Field(3600, ge=60, description="Idempotency key TTL (seconds)")
    idempotency_claim_ttl: int = Field(
        300, ge=30, description="In-progress marker TTL while a submission runs (seconds)"
    )

    # === CORS (env 외부화) ===
    cors_origins_str: str = Field(
        DEFAULT_CORS_ORIGINS,
        validation_alias=AliasChoices("ORIGIN", "SUBMISSION_CORS_ORIGINS_STR"),
        description="Allowed CORS origins (콤마 구분)",
    )

    @property
    def cors_origins(self) -> list[str]:
        """CORS origins 파싱."""
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # === OpenTelemetry ===
    otel_enabled: bool = Field(
        False,
        validation_alias=AliasChoices("OTEL_ENABLED", "SUBMISSION_OTEL_ENABLED"),
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("prod", "production")

    model_config = SettingsConfigDict(
        env_prefix="SUBMISSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """캐시된 Settings 인스턴스 반환."""
    return Settings()
