"""HTTP Controllers."""

from submission.presentation.http.controllers.health import router as health_router
from submission.presentation.http.controllers.submission import router as submission_router

__all__ = ["health_router", "submission_router"]
