"""Submission Application Layer."""
