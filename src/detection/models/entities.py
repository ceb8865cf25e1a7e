"""Data models for PII detection over relay message bodies."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Tuple


class PIICategory(Enum):
    """Categories of reporter-identifying information (closed set)."""

    SSN = "ssn"
    CREDIT_CARD = "credit_card"
    EMAIL = "email"
    US_PHONE = "us_phone"
    IP_ADDRESS = "ip_address"
    DATE_OF_BIRTH = "date_of_birth"
    STREET_ADDRESS = "street_address"
    EMPLOYEE_ID = "employee_id"


@dataclass(frozen=True)
class PIIMatch:
    """A single detected span. Offsets are half-open over the scanned str."""

    category: PIICategory
    text: str
    start: int
    end: int
    warning: str

    def __len__(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "PIIMatch") -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "warning": self.warning,
        }


@dataclass(frozen=True)
class DetectionResult:
    """Result of one scan over a text body."""

    matches: Tuple[PIIMatch, ...] = ()
    warnings: Tuple[str, ...] = ()

    @classmethod
    def from_matches(cls, matches: List[PIIMatch]) -> "DetectionResult":
        """Build a result, ordering by start offset and deduplicating warnings.

        The sort is stable so matches sharing a start keep catalog order.
        """
        ordered = tuple(sorted(matches, key=lambda m: m.start))
        warnings: List[str] = []
        for m in ordered:
            if m.warning not in warnings:
                warnings.append(m.warning)
        return cls(matches=ordered, warnings=tuple(warnings))

    @property
    def has_pii(self) -> bool:
        return bool(self.matches)

    @property
    def count(self) -> int:
        return len(self.matches)

    @property
    def categories(self) -> FrozenSet[PIICategory]:
        return frozenset(m.category for m in self.matches)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        by_category = {}
        for m in self.matches:
            by_category[m.category.value] = by_category.get(m.category.value, 0) + 1

        return {
            "has_pii": self.has_pii,
            "count": self.count,
            "warnings": list(self.warnings),
            "matches": [m.to_dict() for m in self.matches],
            "summary": {"by_category": by_category},
        }
