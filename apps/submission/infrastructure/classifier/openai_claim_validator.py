"""OpenAI Claim Validator - ClaimValidator 구현체.

Chat Completions API 로 영수증 이미지(data URI)를 판정한다.
응답은 ```json 펜스로 감싸져 올 수 있으므로 제거 후 파싱.

실패 정책:
- 빈 응답, JSON 아님, validityFactor 누락 → ValidationServiceError
- openai.OpenAIError (타임아웃, 연결 오류, 4xx/5xx) → ValidationServiceError
- 재시도 없음
"""

from __future__ import annotations

import json
import logging
import re

import httpx
from openai import AsyncOpenAI, OpenAIError

from submission.application.common.exceptions import ValidationServiceError
from submission.application.submit.ports import ClaimValidator
from submission.domain.value_objects import EncodedImage, ValidationVerdict
from submission.infrastructure.classifier.config import (
    MAX_RETRIES,
    OPENAI_LIMITS,
    build_timeout,
)
from submission.infrastructure.classifier.prompts import RECEIPT_VALIDATION_PROMPT

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)


def strip_code_fence(content: str) -> str:
    """```json ... ``` 펜스 제거."""
    return _CODE_FENCE_RE.sub("", content).strip()


class OpenAIClaimValidator(ClaimValidator):
    """GPT Vision 기반 영수증 판정기."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o",
        max_tokens: int = 350,
        prompt: str = RECEIPT_VALIDATION_PROMPT,
    ):
        """초기화.

        Args:
            client: AsyncOpenAI 클라이언트 (max_retries=0 권장)
            model: Vision 모델명
            max_tokens: 응답 토큰 상한
            prompt: 판정 프롬프트
        """
        self._client = client
        self._model = model
        self._max_tokens = max_tokens
        self._prompt = prompt

    @classmethod
    def from_api_key(
        cls,
        api_key: str,
        model: str = "gpt-4o",
        max_tokens: int = 350,
        timeout_seconds: float = 30.0,
    ) -> OpenAIClaimValidator:
        http_client = httpx.AsyncClient(
            timeout=build_timeout(timeout_seconds),
            limits=OPENAI_LIMITS,
        )
        client = AsyncOpenAI(
            api_key=api_key,
            http_client=http_client,
            max_retries=MAX_RETRIES,
        )
        logger.info("OpenAIClaimValidator initialized", extra={"model": model})
        return cls(client=client, model=model, max_tokens=max_tokens)

    async def validate(self, image: EncodedImage) -> ValidationVerdict:
        """영수증 판정."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": self._prompt},
                            {"type": "image_url", "image_url": {"url": image.data_uri}},
                        ],
                    }
                ],
            )
        except OpenAIError as e:
            logger.error(
                "claim_validation_call_failed",
                extra={"model": self._model, "error_type": type(e).__name__, "error": str(e)},
            )
            raise ValidationServiceError(f"{type(e).__name__}: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            logger.error("claim_validation_empty_response", extra={"model": self._model})
            raise ValidationServiceError("empty response")

        try:
            payload = json.loads(strip_code_fence(content))
            verdict = ValidationVerdict.from_payload(payload)
        except ValueError as e:
            # json.JSONDecodeError 는 ValueError 하위 클래스
            logger.error(
                "claim_validation_malformed_response",
                extra={"model": self._model, "error": str(e), "content_length": len(content)},
            )
            raise ValidationServiceError(str(e)) from e

        logger.debug(
            "claim_validation_completed",
            extra={"model": self._model, "validity_factor": verdict.validity_factor},
        )
        return verdict

    async def close(self) -> None:
        await self._client.close()
