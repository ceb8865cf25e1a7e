"""SQLAlchemy-backed message store."""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
    create_engine,
    func,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from .base import MessageStore
from ..models.message import (
    ANONYMOUS,
    Authored,
    Authorship,
    DeliveryStatus,
    Message,
    MessageDirection,
    SenderType,
)
from ..models.schemas import MAX_SUBJECT_LENGTH

logger = logging.getLogger(__name__)

_AUTHORED = "authored"
_ANONYMOUS = "anonymous"


class Base(DeclarativeBase):
    pass


def _enum_type(enum_cls, *, name: str) -> Enum:
    """Store enum members by value."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
    )


class CaseMessageRow(Base):
    """Relay channel message. Has no column for reporter contact data."""

    __tablename__ = "case_messages"
    __table_args__ = (
        Index("idx_case_messages_tenant_case", "tenant_id", "case_id"),
    )

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    case_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    direction: Mapped[MessageDirection] = mapped_column(
        _enum_type(MessageDirection, name="message_direction"), nullable=False
    )
    sender_type: Mapped[SenderType] = mapped_column(
        _enum_type(SenderType, name="message_sender_type"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    subject: Mapped[Optional[str]] = mapped_column(String(MAX_SUBJECT_LENGTH), nullable=True)
    author_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    read_by_kind: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    read_by_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    delivery_status: Mapped[DeliveryStatus] = mapped_column(
        _enum_type(DeliveryStatus, name="message_delivery_status"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on round trip
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _read_by_columns(read_by: Optional[Authorship]):
    if read_by is None:
        return None, None
    if isinstance(read_by, Authored):
        return _AUTHORED, read_by.user_id
    return _ANONYMOUS, None


def _to_row(message: Message) -> CaseMessageRow:
    kind, reader = _read_by_columns(message.read_by)
    return CaseMessageRow(
        id=message.id,
        tenant_id=message.tenant_id,
        case_id=message.case_id,
        direction=message.direction,
        sender_type=message.sender_type,
        content=message.content,
        subject=message.subject,
        author_user_id=message.created_by,
        is_read=message.is_read,
        read_at=message.read_at,
        read_by_kind=kind,
        read_by_user_id=reader,
        delivery_status=message.delivery_status,
        created_at=message.created_at,
    )


def _to_message(row: CaseMessageRow) -> Message:
    if row.read_by_kind == _AUTHORED:
        read_by = Authored(row.read_by_user_id)
    elif row.read_by_kind == _ANONYMOUS:
        read_by = ANONYMOUS
    else:
        read_by = None
    author = Authored(row.author_user_id) if row.author_user_id is not None else ANONYMOUS
    return Message(
        id=row.id,
        case_id=row.case_id,
        tenant_id=row.tenant_id,
        direction=row.direction,
        sender_type=row.sender_type,
        content=row.content,
        subject=row.subject,
        author=author,
        is_read=row.is_read,
        read_at=_as_utc(row.read_at),
        read_by=read_by,
        delivery_status=row.delivery_status,
        created_at=_as_utc(row.created_at),
    )


class SqlAlchemyMessageStore(MessageStore):
    """Message store over any SQLAlchemy engine.

    Each operation runs in its own transaction. ``mark_read`` is a single
    conditional UPDATE so concurrent readers never overwrite each other.
    """

    def __init__(self, engine: Engine, create_schema: bool = True):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        if create_schema:
            Base.metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str, **engine_kwargs) -> "SqlAlchemyMessageStore":
        if database_url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(database_url, **engine_kwargs)
        logger.info("Message store connected (dialect=%s)", engine.dialect.name)
        return cls(engine)

    def add(self, message: Message) -> Message:
        with self._session_factory.begin() as session:
            session.add(_to_row(message))
        return message

    def get(self, message_id: str, tenant_id: str) -> Optional[Message]:
        with self._session_factory() as session:
            row = session.scalars(
                select(CaseMessageRow).where(
                    CaseMessageRow.id == message_id,
                    CaseMessageRow.tenant_id == tenant_id,
                )
            ).first()
            return _to_message(row) if row is not None else None

    def list_for_case(self, case_id: str, tenant_id: str) -> List[Message]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(CaseMessageRow)
                .where(
                    CaseMessageRow.case_id == case_id,
                    CaseMessageRow.tenant_id == tenant_id,
                )
                .order_by(CaseMessageRow.created_at, CaseMessageRow.row_id)
            ).all()
            return [_to_message(row) for row in rows]

    def mark_read(
        self,
        message_ids: Iterable[str],
        tenant_id: str,
        read_at: datetime,
        read_by: Authorship,
    ) -> int:
        ids = list(set(message_ids))
        if not ids:
            return 0
        kind, reader = _read_by_columns(read_by)
        stmt = (
            update(CaseMessageRow)
            .where(
                CaseMessageRow.id.in_(ids),
                CaseMessageRow.tenant_id == tenant_id,
                CaseMessageRow.is_read.is_(False),
            )
            .values(
                is_read=True,
                read_at=read_at,
                read_by_kind=kind,
                read_by_user_id=reader,
            )
            .execution_options(synchronize_session=False)
        )
        with self._session_factory.begin() as session:
            result = session.execute(stmt)
            return result.rowcount

    def update_delivery_status(
        self, message_id: str, tenant_id: str, status: DeliveryStatus
    ) -> Message:
        with self._session_factory.begin() as session:
            row = session.scalars(
                select(CaseMessageRow)
                .where(
                    CaseMessageRow.id == message_id,
                    CaseMessageRow.tenant_id == tenant_id,
                )
                .with_for_update()
            ).first()
            if row is None:
                raise KeyError(message_id)
            updated = _to_message(row).with_delivery_status(status)
            row.delivery_status = updated.delivery_status
        return updated

    def count(
        self,
        case_id: str,
        tenant_id: str,
        direction: Optional[MessageDirection] = None,
        is_read: Optional[bool] = None,
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(CaseMessageRow)
            .where(
                CaseMessageRow.case_id == case_id,
                CaseMessageRow.tenant_id == tenant_id,
            )
        )
        if direction is not None:
            stmt = stmt.where(CaseMessageRow.direction == direction)
        if is_read is not None:
            stmt = stmt.where(CaseMessageRow.is_read == is_read)
        with self._session_factory() as session:
            return session.scalar(stmt) or 0
