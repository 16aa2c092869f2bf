"""Captcha Adapters."""

from submission.infrastructure.captcha.recaptcha_verifier import RecaptchaVerifier

__all__ = ["RecaptchaVerifier"]
