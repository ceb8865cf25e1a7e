"""Identity-protecting message relay for anonymous reporter communication."""

from .collaborators import (
    CaseRecord,
    InMemoryCaseDirectory,
    InMemoryIdentityResolver,
    ReporterContact,
    ReporterRecord,
)
from .dispatch import QueueNotificationDispatcher, QueuedJob
from .errors import (
    CaseNotLinkedError,
    InvalidTransitionError,
    NotFoundError,
    PiiAcknowledgmentRequired,
    RelayError,
    RelayValidationError,
)
from .events import EventBus
from .factory import build_message_store, build_relay_service
from .logging_config import setup_logging
from .service import MessageRelayService

__all__ = [
    "CaseRecord",
    "InMemoryCaseDirectory",
    "InMemoryIdentityResolver",
    "ReporterContact",
    "ReporterRecord",
    "QueueNotificationDispatcher",
    "QueuedJob",
    "CaseNotLinkedError",
    "InvalidTransitionError",
    "NotFoundError",
    "PiiAcknowledgmentRequired",
    "RelayError",
    "RelayValidationError",
    "EventBus",
    "build_message_store",
    "build_relay_service",
    "setup_logging",
    "MessageRelayService",
]
