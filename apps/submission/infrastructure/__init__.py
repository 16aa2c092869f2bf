"""Submission Infrastructure Layer."""
