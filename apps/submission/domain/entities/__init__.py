"""Submission Domain Entities."""

from submission.domain.entities.submission import Submission

__all__ = ["Submission"]
