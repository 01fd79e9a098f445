"""Skillverse backend: points ledger, enrollments and lesson progress."""

__version__ = "1.0.0"
