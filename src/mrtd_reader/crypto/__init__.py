"""Chip data integrity checks."""

from .integrity import IntegrityResult, IntegrityVerifier

__all__ = ["IntegrityResult", "IntegrityVerifier"]
