"""Submit Ports - Captcha, Classifier, Ledger, Idempotency Cache."""

from submission.application.submit.ports.captcha_verifier import CaptchaVerifier
from submission.application.submit.ports.claim_validator import ClaimValidator
from submission.application.submit.ports.idempotency_cache import IdempotencyCache
from submission.application.submit.ports.ledger_gateway import SubmissionLedgerGateway

__all__ = [
    "CaptchaVerifier",
    "ClaimValidator",
    "IdempotencyCache",
    "SubmissionLedgerGateway",
]
