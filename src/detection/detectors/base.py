"""Abstract base class for PII detectors."""

from abc import ABC, abstractmethod
from typing import FrozenSet, Optional

from ..models.entities import DetectionResult, PIICategory


class BaseDetector(ABC):
    """Interface for text PII detectors.

    Only ``detect`` is abstract; the projections are derived from it so every
    implementation answers ``classify`` and ``contains_category`` from the
    same single scan.
    """

    @abstractmethod
    def detect(self, text: str) -> DetectionResult:
        """
        Scan a text body for PII.

        Args:
            text: Text to scan.

        Returns:
            DetectionResult with matches ordered by start offset.
        """

    @abstractmethod
    def sanitize(self, text: str, marker: Optional[str] = None) -> str:
        """
        Replace every detected span with a redaction marker.

        Args:
            text: Text to redact.
            marker: Replacement string. Implementation default when None.

        Returns:
            The redacted text, or the input unchanged when nothing was found.
        """

    def classify(self, text: str) -> FrozenSet[PIICategory]:
        """Distinct categories present in text."""
        return self.detect(text).categories

    def contains_category(self, text: str, category: PIICategory) -> bool:
        return category in self.classify(text)
