"""In-process message store guarded by a single lock."""

import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .base import MessageStore
from ..models.message import Authorship, DeliveryStatus, Message, MessageDirection


class InMemoryMessageStore(MessageStore):
    """Dict-backed store. Messages are immutable, so reads hand out the stored
    instances directly and every write swaps in a new version."""

    def __init__(self):
        self._messages: Dict[str, Message] = {}
        self._sequence: Dict[str, int] = {}
        self._lock = threading.Lock()

    def add(self, message: Message) -> Message:
        with self._lock:
            if message.id in self._messages:
                raise ValueError(f"Message {message.id} already exists")
            self._messages[message.id] = message
            self._sequence[message.id] = len(self._sequence)
        return message

    def get(self, message_id: str, tenant_id: str) -> Optional[Message]:
        with self._lock:
            message = self._messages.get(message_id)
        if message is None or message.tenant_id != tenant_id:
            return None
        return message

    def list_for_case(self, case_id: str, tenant_id: str) -> List[Message]:
        with self._lock:
            found = [
                m for m in self._messages.values()
                if m.case_id == case_id and m.tenant_id == tenant_id
            ]
            return sorted(found, key=lambda m: (m.created_at, self._sequence[m.id]))

    def mark_read(
        self,
        message_ids: Iterable[str],
        tenant_id: str,
        read_at: datetime,
        read_by: Authorship,
    ) -> int:
        flipped = 0
        with self._lock:
            for message_id in set(message_ids):
                message = self._messages.get(message_id)
                if message is None or message.tenant_id != tenant_id or message.is_read:
                    continue
                self._messages[message_id] = message.mark_read(read_at, read_by)
                flipped += 1
        return flipped

    def update_delivery_status(
        self, message_id: str, tenant_id: str, status: DeliveryStatus
    ) -> Message:
        with self._lock:
            message = self._messages.get(message_id)
            if message is None or message.tenant_id != tenant_id:
                raise KeyError(message_id)
            updated = message.with_delivery_status(status)
            self._messages[message_id] = updated
        return updated

    def count(
        self,
        case_id: str,
        tenant_id: str,
        direction: Optional[MessageDirection] = None,
        is_read: Optional[bool] = None,
    ) -> int:
        with self._lock:
            return sum(
                1 for m in self._messages.values()
                if m.case_id == case_id
                and m.tenant_id == tenant_id
                and (direction is None or m.direction == direction)
                and (is_read is None or m.is_read == is_read)
            )
