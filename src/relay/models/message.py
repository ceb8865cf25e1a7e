"""Relay channel message entity.

A ``Message`` has no attribute that can hold reporter contact data; the
reporter's contact channel lives only on ``relay.collaborators.ReporterContact``,
which nothing here references.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from ..errors import InvalidTransitionError


class MessageDirection(Enum):
    INBOUND = "inbound"    # from reporter
    OUTBOUND = "outbound"  # to reporter


class SenderType(Enum):
    INVESTIGATOR = "INVESTIGATOR"
    REPORTER = "REPORTER"


class DeliveryStatus(Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


_ALLOWED_TRANSITIONS = {
    DeliveryStatus.PENDING: {DeliveryStatus.SENT, DeliveryStatus.FAILED},
    DeliveryStatus.SENT: set(),
    DeliveryStatus.FAILED: set(),
}


@dataclass(frozen=True)
class Authored:
    """An internal, authenticated user."""

    user_id: str


@dataclass(frozen=True)
class Anonymous:
    """The reporter, who never has an identity inside the relay."""


ANONYMOUS = Anonymous()

Authorship = Union[Authored, Anonymous]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """One unit of communication on a case's relay channel.

    Instances are immutable; read-marking and delivery transitions return a
    new instance so ``direction`` and ``content`` can never change.
    """

    case_id: str
    tenant_id: str
    direction: MessageDirection
    sender_type: SenderType
    content: str
    author: Authorship
    subject: Optional[str] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    read_by: Optional[Authorship] = None
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def outbound(
        cls,
        case_id: str,
        tenant_id: str,
        content: str,
        user_id: str,
        subject: Optional[str] = None,
    ) -> "Message":
        """Investigator -> reporter."""
        return cls(
            case_id=case_id,
            tenant_id=tenant_id,
            direction=MessageDirection.OUTBOUND,
            sender_type=SenderType.INVESTIGATOR,
            content=content,
            subject=subject,
            author=Authored(user_id),
            delivery_status=DeliveryStatus.PENDING,
        )

    @classmethod
    def inbound(cls, case_id: str, tenant_id: str, content: str) -> "Message":
        """Reporter -> investigator."""
        return cls(
            case_id=case_id,
            tenant_id=tenant_id,
            direction=MessageDirection.INBOUND,
            sender_type=SenderType.REPORTER,
            content=content,
            author=ANONYMOUS,
        )

    @property
    def created_by(self) -> Optional[str]:
        return self.author.user_id if isinstance(self.author, Authored) else None

    def mark_read(self, read_at: datetime, read_by: Authorship) -> "Message":
        """Idempotent: an already-read message is returned unchanged."""
        if self.is_read:
            return self
        return replace(self, is_read=True, read_at=read_at, read_by=read_by)

    def with_delivery_status(self, status: DeliveryStatus) -> "Message":
        if status == self.delivery_status:
            return self
        if status not in _ALLOWED_TRANSITIONS[self.delivery_status]:
            raise InvalidTransitionError(
                f"Cannot move message {self.id} from "
                f"{self.delivery_status.value} to {status.value}"
            )
        return replace(self, delivery_status=status)
