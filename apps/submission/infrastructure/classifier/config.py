"""OpenAI 공통 설정.

타임아웃, 연결 제한, 재시도 설정 등.
"""

import httpx

# ==========================================
# HTTP 연결 제한 설정
# ==========================================

OPENAI_LIMITS = httpx.Limits(
    max_connections=50,
    max_keepalive_connections=10,
    keepalive_expiry=30.0,
)

# ==========================================
# OpenAI 클라이언트 공통 설정
# ==========================================

# 판정 실패는 해당 제출의 종료 사유. SDK 자동 재시도도 끈다.
MAX_RETRIES = 0


def build_timeout(read_seconds: float) -> httpx.Timeout:
    """판정 호출 1회 타임아웃."""
    return httpx.Timeout(
        connect=5.0,
        read=read_seconds,
        write=10.0,
        pool=5.0,
    )
