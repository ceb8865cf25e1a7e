"""Abstract base class for message persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from ..models.message import Authorship, DeliveryStatus, Message, MessageDirection


class MessageStore(ABC):
    """Persistence boundary for relay messages, always scoped by tenant."""

    @abstractmethod
    def add(self, message: Message) -> Message:
        """Persist a newly created message and return it."""

    @abstractmethod
    def get(self, message_id: str, tenant_id: str) -> Optional[Message]:
        """Fetch one message, or None if absent in this tenant."""

    @abstractmethod
    def list_for_case(self, case_id: str, tenant_id: str) -> List[Message]:
        """All messages of a case, ordered by creation ascending."""

    @abstractmethod
    def mark_read(
        self,
        message_ids: Iterable[str],
        tenant_id: str,
        read_at: datetime,
        read_by: Authorship,
    ) -> int:
        """
        Mark messages read as one all-or-nothing update.

        Only rows still unread at the time of the update are touched, so
        concurrent callers converge on a fully-read set without overwriting
        each other's read timestamps.

        Returns:
            Number of messages this call flipped from unread to read.
        """

    @abstractmethod
    def update_delivery_status(
        self, message_id: str, tenant_id: str, status: DeliveryStatus
    ) -> Message:
        """
        Apply a delivery status transition.

        Raises:
            KeyError: If the message does not exist.
            InvalidTransitionError: If the transition is not allowed.
        """

    @abstractmethod
    def count(
        self,
        case_id: str,
        tenant_id: str,
        direction: Optional[MessageDirection] = None,
        is_read: Optional[bool] = None,
    ) -> int:
        """Count messages of a case, optionally filtered."""
