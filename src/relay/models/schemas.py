"""Pydantic schemas for relay requests, views, notification jobs and events."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .message import Message

# Upper bound on a relay message body, in characters
MAX_CONTENT_LENGTH = 20_000
MAX_SUBJECT_LENGTH = 255


class SendToReporterRequest(BaseModel):
    case_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    subject: Optional[str] = Field(None, max_length=MAX_SUBJECT_LENGTH)
    skip_pii_check: bool = False
    acknowledged_pii_warnings: Optional[List[str]] = None


class ReceiveFromReporterRequest(BaseModel):
    access_code: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class PiiCheckResult(BaseModel):
    has_pii: bool
    warnings: List[str] = Field(default_factory=list)
    blocked: bool = False
    block_reason: Optional[str] = None


class UnreadCount(BaseModel):
    inbound_unread: int = Field(..., ge=0)
    outbound_unread: int = Field(..., ge=0)
    total_messages: int = Field(..., ge=0)


class MessageView(BaseModel):
    """What either party sees of a message. Built only from ``Message``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    direction: Literal["inbound", "outbound"]
    content: str
    subject: Optional[str] = None
    created_at: datetime
    is_read: bool
    read_at: Optional[datetime] = None
    sender_type: str

    @classmethod
    def from_message(cls, message: Message) -> "MessageView":
        return cls(
            id=message.id,
            direction=message.direction.value,
            content=message.content,
            subject=message.subject,
            created_at=message.created_at,
            is_read=message.is_read,
            read_at=message.read_at,
            sender_type=message.sender_type.value,
        )


class NotificationContext(BaseModel):
    """Template variables for the reporter alert. Never carries message text."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    case_reference: str
    has_access_code: bool
    status_check_url: Optional[str] = None


class NotificationJob(BaseModel):
    """Payload handed to the notification dispatcher."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tenant_id: str
    template_id: str
    to: str
    context: NotificationContext


class JobOptions(BaseModel):
    """Delivery hints for the queue transport, which owns retry execution."""

    model_config = ConfigDict(frozen=True)

    attempts: int = Field(3, ge=1)
    backoff_type: Literal["exponential", "fixed"] = "exponential"
    backoff_delay_ms: int = Field(1000, ge=0)


class AuditEvent(BaseModel):
    """Side-channel signal for audit/notification subscribers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["message.sent", "message.received"]
    tenant_id: str
    case_id: str
    message_id: str
    actor: Optional[str] = None
    direction: Literal["inbound", "outbound"]
