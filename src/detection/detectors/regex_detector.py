"""Regex-catalog PII detection engine."""

import logging
from typing import List, Optional, Sequence, Tuple

from .base import BaseDetector
from ..models.entities import DetectionResult, PIIMatch
from ..patterns import PATTERN_CATALOG, PatternMatcher

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "[REDACTED]"


class PIIDetectionEngine(BaseDetector):
    """Run every catalog matcher over a text body.

    Holds no mutable state: the matcher sequence is fixed at construction and
    each scan passes positions explicitly, so one engine is shared freely
    between concurrent callers.
    """

    def __init__(
        self,
        matchers: Optional[Sequence[PatternMatcher]] = None,
        default_marker: str = DEFAULT_MARKER,
    ):
        self.matchers: Tuple[PatternMatcher, ...] = tuple(
            PATTERN_CATALOG if matchers is None else matchers
        )
        self.default_marker = default_marker

    def detect(self, text: str) -> DetectionResult:
        """Detect PII with every matcher independently.

        Spans are not deduplicated across categories: a span satisfying two
        rules is reported once per category.
        """
        if not text or not text.strip():
            return DetectionResult()

        matches: List[PIIMatch] = []
        for matcher in self.matchers:
            matches.extend(matcher.scan(text))

        result = DetectionResult.from_matches(matches)
        if result.has_pii:
            logger.debug(
                "Detected %d PII spans (%s)",
                result.count,
                ", ".join(sorted(c.value for c in result.categories)),
            )
        return result

    def sanitize(self, text: str, marker: Optional[str] = None) -> str:
        """Redact every detected span using offsets from a single detect pass."""
        marker = self.default_marker if marker is None else marker
        result = self.detect(text)
        if not result.has_pii:
            return text

        redacted = text
        # Right-to-left so each splice leaves the offsets to its left intact
        for start, end in reversed(_merge_spans(result.matches)):
            redacted = redacted[:start] + marker + redacted[end:]
        return redacted


def _merge_spans(matches: Sequence[PIIMatch]) -> List[Tuple[int, int]]:
    """Collapse overlapping spans into disjoint ones, ascending by start.

    Two categories claiming the same (or partially the same) text become one
    redaction; spans that merely touch stay separate.
    """
    spans: List[Tuple[int, int]] = []
    for m in sorted(matches, key=lambda m: m.start):
        if spans and m.start < spans[-1][1]:
            last_start, last_end = spans[-1]
            spans[-1] = (last_start, max(last_end, m.end))
        else:
            spans.append((m.start, m.end))
    return spans
