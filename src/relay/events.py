"""Synchronous in-process event bus for relay audit events."""

import logging
import threading
from typing import Callable, Dict, List

from .models.schemas import AuditEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[AuditEvent], None]

ALL_EVENTS = "*"


class EventBus:
    """Dispatch ``AuditEvent`` instances to subscribers by event type.

    Handlers run on the emitting thread. A failing handler raises out of
    ``emit``; deciding whether that matters is the emitter's job.
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for one event type, or ``"*"`` for all.

        Returns:
            A callable that removes the subscription.
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(event_type, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def emit(self, event: AuditEvent) -> None:
        with self._lock:
            handlers = list(self._handlers.get(event.type, []))
            handlers += self._handlers.get(ALL_EVENTS, [])
        logger.debug("Emitting %s to %d handler(s)", event.type, len(handlers))
        for handler in handlers:
            handler(event)
