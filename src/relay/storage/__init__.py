"""Message persistence backends."""

from .base import MessageStore
from .memory_store import InMemoryMessageStore
from .sql_store import SqlAlchemyMessageStore

__all__ = ["MessageStore", "InMemoryMessageStore", "SqlAlchemyMessageStore"]
