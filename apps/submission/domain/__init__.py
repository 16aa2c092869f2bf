"""Submission Domain Layer."""
