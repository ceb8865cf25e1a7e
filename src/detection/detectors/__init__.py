"""PII detection modules."""

from .base import BaseDetector
from .regex_detector import DEFAULT_MARKER, PIIDetectionEngine

__all__ = [
    "BaseDetector",
    "DEFAULT_MARKER",
    "PIIDetectionEngine",
]
