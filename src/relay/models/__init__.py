"""Relay data contracts: the message entity and pydantic schemas."""

from .message import (
    ANONYMOUS,
    Anonymous,
    Authored,
    Authorship,
    DeliveryStatus,
    Message,
    MessageDirection,
    SenderType,
)
from .schemas import (
    AuditEvent,
    JobOptions,
    MessageView,
    NotificationContext,
    NotificationJob,
    PiiCheckResult,
    ReceiveFromReporterRequest,
    SendToReporterRequest,
    UnreadCount,
)

__all__ = [
    "ANONYMOUS",
    "Anonymous",
    "Authored",
    "Authorship",
    "DeliveryStatus",
    "Message",
    "MessageDirection",
    "SenderType",
    "AuditEvent",
    "JobOptions",
    "MessageView",
    "NotificationContext",
    "NotificationJob",
    "PiiCheckResult",
    "ReceiveFromReporterRequest",
    "SendToReporterRequest",
    "UnreadCount",
]
