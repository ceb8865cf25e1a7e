"""PII detection for outbound relay messages."""

from .detectors import BaseDetector, DEFAULT_MARKER, PIIDetectionEngine
from .patterns import PATTERN_CATALOG, PatternMatcher
from .models.entities import (
    PIICategory,
    PIIMatch,
    DetectionResult,
)

__all__ = [
    "BaseDetector",
    "DEFAULT_MARKER",
    "PIIDetectionEngine",
    "PATTERN_CATALOG",
    "PatternMatcher",
    "PIICategory",
    "PIIMatch",
    "DetectionResult",
]
