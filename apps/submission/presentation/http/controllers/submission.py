"""Submission API Controller.

메인 API 엔드포인트:
- POST /submitReceipt: 영수증 제출 → 판정 → (승인 시) 보상
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header
from pydantic import BaseModel, ConfigDict, Field

from submission.application.submit.commands import SubmitReceiptRequest
from submission.setup.constants import ADDRESS_LENGTH
from submission.setup.dependencies import CaptchaGateDep, SubmissionPipelineDep

router = APIRouter(tags=["submission"])
logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Schemas
# ─────────────────────────────────────────────────────────────────────────────


class SubmitReceiptBody(BaseModel):
    """영수증 제출 요청 스키마."""

    model_config = ConfigDict(populate_by_name=True)

    image: str = Field(min_length=1, description="base64 data URI (data:image/*;base64,...)")
    address: str = Field(
        min_length=ADDRESS_LENGTH,
        max_length=ADDRESS_LENGTH,
        description="지갑 주소 (0x 포함 42자)",
    )
    device_id: str = Field(min_length=1, alias="deviceID", description="클라이언트 기기 식별자")


class ValidationBody(BaseModel):
    """판정 결과 (레거시 응답 형식)."""

    model_config = ConfigDict(populate_by_name=True)

    validity_factor: float = Field(alias="validityFactor")
    description_of_analysis: str = Field(alias="descriptionOfAnalysis")


class SubmitReceiptResponse(BaseModel):
    """영수증 제출 응답 스키마."""

    model_config = ConfigDict(populate_by_name=True)

    validation: ValidationBody
    approved: bool = Field(description="validityFactor == 1")
    reward_issued: bool = Field(
        alias="rewardIssued",
        description="보상 트랜잭션 확정 여부 (승인되었지만 실패한 경우 false)",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Endpoints
# ─────────────────────────────────────────────────────────────────────────────


@router.post(
    "/submitReceipt",
    response_model=SubmitReceiptResponse,
    summary="Submit a receipt photo for validation and reward",
    responses={
        400: {"description": "이미지/주소 형식 오류"},
        403: {"description": "captcha 검증 실패"},
        409: {"description": "사이클 제출 한도 도달"},
        500: {"description": "판정 서비스 오류"},
        503: {"description": "원장 조회 불가"},
    },
)
async def submit_receipt(
    payload: SubmitReceiptBody,
    captcha_gate: CaptchaGateDep,
    pipeline: SubmissionPipelineDep,
    x_captcha_token: str | None = Header(None, alias="X-Captcha-Token"),
    x_idempotency_key: str | None = Header(None, alias="X-Idempotency-Key"),
) -> SubmitReceiptResponse:
    """영수증 사진을 제출합니다.

    클라이언트는 approved / rewardIssued 로
    "반려" 와 "승인되었으나 보상 실패" 를 구분할 수 있다.
    """
    await captcha_gate.ensure_human(x_captcha_token)

    outcome = await pipeline.submit(
        SubmitReceiptRequest(
            image=payload.image,
            address=payload.address,
            device_id=payload.device_id,
            idempotency_key=x_idempotency_key,
        )
    )

    return SubmitReceiptResponse(
        validation=ValidationBody(
            validity_factor=outcome.verdict.validity_factor,
            description_of_analysis=outcome.verdict.description_of_analysis,
        ),
        approved=outcome.approved,
        reward_issued=outcome.reward_issued,
    )
