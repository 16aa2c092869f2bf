"""Receipt Classifier Adapters."""

from submission.infrastructure.classifier.openai_claim_validator import OpenAIClaimValidator

__all__ = ["OpenAIClaimValidator"]
