"""Submission Presentation Layer."""
