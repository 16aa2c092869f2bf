"""Submit Commands."""

from submission.application.submit.commands.captcha_gate import CaptchaGate
from submission.application.submit.commands.submission_pipeline import (
    SubmissionPipeline,
    SubmitReceiptRequest,
)

__all__ = ["CaptchaGate", "SubmissionPipeline", "SubmitReceiptRequest"]
