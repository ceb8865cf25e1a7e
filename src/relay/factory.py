"""Factory for constructing a fully wired Message Relay Service."""

import logging
from typing import Optional

from detection import BaseDetector, PIIDetectionEngine

from .collaborators import CaseLookup, IdentityResolver, NotificationDispatcher
from .config import Settings, get_settings
from .dispatch import QueueNotificationDispatcher
from .events import EventBus
from .service import MessageRelayService
from .storage import InMemoryMessageStore, MessageStore, SqlAlchemyMessageStore

logger = logging.getLogger(__name__)


def build_message_store(settings: Settings) -> MessageStore:
    """Pick the store named by ``message_store_backend``: "memory" | "sql"."""
    backend = settings.message_store_backend.lower()
    if backend == "sql":
        return SqlAlchemyMessageStore.from_url(settings.database_url)
    if backend == "memory":
        return InMemoryMessageStore()
    raise ValueError(f"Unknown message store backend: {settings.message_store_backend}")


def build_relay_service(
    case_lookup: CaseLookup,
    identity_resolver: IdentityResolver,
    settings: Optional[Settings] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
    store: Optional[MessageStore] = None,
    event_bus: Optional[EventBus] = None,
    engine: Optional[BaseDetector] = None,
) -> MessageRelayService:
    """Build a MessageRelayService, filling in defaults from settings.

    Case lookup and identity resolution belong to other subsystems and must
    always be supplied.
    """
    settings = settings or get_settings()

    if engine is None:
        engine = PIIDetectionEngine(default_marker=settings.redaction_marker)
    if store is None:
        store = build_message_store(settings)
    if dispatcher is None:
        dispatcher = QueueNotificationDispatcher()
    if event_bus is None:
        event_bus = EventBus()

    logger.info(
        "Relay service built (store=%s, dispatcher=%s)",
        type(store).__name__,
        type(dispatcher).__name__,
    )
    return MessageRelayService(
        engine=engine,
        store=store,
        case_lookup=case_lookup,
        identity_resolver=identity_resolver,
        dispatcher=dispatcher,
        event_bus=event_bus,
        settings=settings,
    )
