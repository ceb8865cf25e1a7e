"""Pattern catalog: one regex matcher per PII category.

Ordered most-sensitive-first so a national ID is tagged before a looser
numeric pattern is considered. Extending the catalog means appending a
``PatternMatcher`` (and a ``PIICategory`` member); entries are never
reordered unless the sensitivity ranking itself changes.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Tuple

from .models.entities import PIICategory, PIIMatch


def luhn_valid(number: str) -> bool:
    """Validate a payment card number with the Luhn checksum."""
    digits = [int(d) for d in re.sub(r"\D", "", number)]
    if len(digits) < 13 or len(digits) > 19:
        return False

    checksum = 0
    for i, digit in enumerate(reversed(digits)):
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        checksum += digit
    return checksum % 10 == 0


def ipv4_valid(address: str) -> bool:
    """Every octet must fall in 0-255."""
    return all(0 <= int(part) <= 255 for part in address.split("."))


@dataclass(frozen=True)
class PatternMatcher:
    """A single detection rule for one PII category.

    ``scan`` never relies on cursor state held by the compiled pattern; the
    search position is passed explicitly on every call, so one matcher can be
    shared by any number of concurrent scans.
    """

    category: PIICategory
    pattern: re.Pattern
    warning: str
    description: str = ""
    validator: Optional[Callable[[str], bool]] = field(default=None, compare=False)

    def scan(self, text: str) -> Iterator[PIIMatch]:
        pos = 0
        length = len(text)
        while pos <= length:
            m = self.pattern.search(text, pos)
            if m is None:
                break
            if m.end() == m.start():
                # zero-length: step past it or the scan never terminates
                pos = m.end() + 1
                continue
            pos = m.end()
            if self.validator is not None and not self.validator(m.group()):
                continue
            yield PIIMatch(
                category=self.category,
                text=m.group(),
                start=m.start(),
                end=m.end(),
                warning=self.warning,
            )


_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?"
    r"|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)

_STREET_SUFFIXES = (
    r"(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Lane|Ln|Drive|Dr"
    r"|Court|Ct|Way|Place|Pl|Terrace|Parkway|Pkwy|Highway|Hwy)"
)


PATTERN_CATALOG: Tuple[PatternMatcher, ...] = (
    # National ID: area 000/666/9xx, group 00 and serial 0000 are never issued
    PatternMatcher(
        category=PIICategory.SSN,
        pattern=re.compile(
            r"\b(?!000|666|9\d{2})\d{3}([-\s]?)(?!00)\d{2}\1(?!0000)\d{4}\b"
        ),
        warning="Message may contain a Social Security number",
        description="US Social Security Number",
    ),
    # Payment card: Visa, Mastercard, Discover, Amex; Luhn-checked
    PatternMatcher(
        category=PIICategory.CREDIT_CARD,
        pattern=re.compile(
            r"\b(?:(?:4\d{3}|5[1-5]\d{2}|6(?:011|5\d{2}))(?:[-\s]?\d{4}){2}[-\s]?\d{1,7}"
            r"|3[47]\d{2}[-\s]?\d{6}[-\s]?\d{5})\b"
        ),
        warning="Message may contain a payment card number",
        description="Payment card number",
        validator=luhn_valid,
    ),
    PatternMatcher(
        category=PIICategory.EMAIL,
        pattern=re.compile(
            r"\b[A-Za-z0-9._%+\-]{1,64}@[A-Za-z0-9.\-]{1,253}\.[A-Za-z]{2,63}\b"
        ),
        warning="Message may contain an email address",
        description="Email address",
    ),
    # NANP: optional +1, area code [2-9]XX, separators required between groups
    PatternMatcher(
        category=PIICategory.US_PHONE,
        pattern=re.compile(
            r"(?<![\w+])(?:\+?1[-.\s]?)?"
            r"(?:\([2-9]\d{2}\)\s?|[2-9]\d{2}[-.\s])"
            r"\d{3}[-.\s]\d{4}(?!\d)"
        ),
        warning="Message may contain a phone number",
        description="US phone number",
    ),
    PatternMatcher(
        category=PIICategory.IP_ADDRESS,
        pattern=re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b"),
        warning="Message may contain an IP address",
        description="IPv4 address",
        validator=ipv4_valid,
    ),
    PatternMatcher(
        category=PIICategory.DATE_OF_BIRTH,
        pattern=re.compile(
            r"\b(?:(?:0?[1-9]|1[0-2])[/-](?:0?[1-9]|[12]\d|3[01])[/-](?:19|20)\d{2}"
            r"|(?:19|20)\d{2}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12]\d|3[01])"
            r"|" + _MONTHS + r"\.?\s+(?:0?[1-9]|[12]\d|3[01]),?\s+(?:19|20)\d{2})\b"
        ),
        warning="Message may contain a date of birth",
        description="Calendar date in a birth-date format",
    ),
    PatternMatcher(
        category=PIICategory.STREET_ADDRESS,
        pattern=re.compile(
            r"\b\d{1,6}\s+(?:[A-Z][A-Za-z]*\.?\s+){1,4}" + _STREET_SUFFIXES + r"\b"
        ),
        warning="Message may contain a street address",
        description="Street address",
    ),
    PatternMatcher(
        category=PIICategory.EMPLOYEE_ID,
        pattern=re.compile(
            r"\b(?:EMP[-#]?\d{4,8}|E#\d{4,8}"
            r"|(?:employee|staff|badge)\s*(?:id|no\.?|number|#)\s*[:#]?\s*"
            r"(?=[A-Z0-9-]*\d)[A-Z0-9-]{4,12})\b",
            re.IGNORECASE,
        ),
        warning="Message may contain an employee identifier",
        description="Employee / badge identifier",
    ),
)
