"""Data models for the PII detection engine."""

from .entities import (
    PIICategory,
    PIIMatch,
    DetectionResult,
)

__all__ = [
    "PIICategory",
    "PIIMatch",
    "DetectionResult",
]
