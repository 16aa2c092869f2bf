"""Submission Domain Value Objects."""

from submission.domain.value_objects.encoded_image import EncodedImage
from submission.domain.value_objects.submission_outcome import SubmissionOutcome
from submission.domain.value_objects.validation_verdict import ValidationVerdict
from submission.domain.value_objects.wallet_address import WalletAddress

__all__ = ["EncodedImage", "SubmissionOutcome", "ValidationVerdict", "WalletAddress"]
