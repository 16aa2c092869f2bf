"""Health Check Controller."""

from fastapi import APIRouter

from submission.setup.constants import SERVICE_NAME, SERVICE_VERSION

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    """서비스 헬스 체크."""
    return {"status": "ok", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def ready() -> dict:
    """서비스 준비 상태 체크."""
    return {"status": "ready"}
