"""Typed failures raised by the message relay.

Resolution failures and policy failures stay distinct types so callers can
decide whether to retry, prompt for acknowledgment, or give up.
"""

from typing import List, Optional


class RelayError(Exception):
    """Base class for relay failures."""


class NotFoundError(RelayError):
    """A case or access code did not resolve within the caller's scope."""


class RelayValidationError(RelayError):
    """A policy rejected the request; ``detail`` carries UI-renderable data."""

    retryable = False

    def __init__(self, message: str, detail: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> dict:
        return {"message": self.message, "retryable": self.retryable, **self.detail}


class PiiAcknowledgmentRequired(RelayValidationError):
    """Outbound content contains PII and the sender has not acknowledged it."""

    def __init__(self, warnings: List[str]):
        super().__init__(
            "Message contains potentially identifying information",
            detail={
                "has_pii": True,
                "warnings": list(warnings),
                "requires_acknowledgment": True,
            },
        )
        self.has_pii = True
        self.warnings = list(warnings)
        self.requires_acknowledgment = True


class CaseNotLinkedError(RelayValidationError):
    """The report exists but triage has not linked it to a case yet."""

    retryable = True

    def __init__(self):
        super().__init__(
            "Your report has not been assigned to a case yet. Please check back later."
        )


class InvalidTransitionError(RelayError):
    """A delivery status change outside PENDING -> SENT | FAILED."""
