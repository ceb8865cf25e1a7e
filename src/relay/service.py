"""Identity-protecting message relay between investigators and anonymous reporters.

The relay is the only path between the two parties. Investigators work in
terms of cases; reporters work in terms of an access code. Neither side ever
receives the other's identifying data: message views and audit events are
built from ``Message`` alone, and the reporter's contact channel is only read
to address a notification job.
"""

import logging
from typing import List, Optional

import structlog

from detection import BaseDetector

from .collaborators import (
    CaseLookup,
    CaseRecord,
    IdentityResolver,
    NotificationDispatcher,
    ReporterRecord,
)
from .config import Settings, get_settings
from .errors import CaseNotLinkedError, NotFoundError, PiiAcknowledgmentRequired
from .events import EventBus
from .models.message import (
    ANONYMOUS,
    Authored,
    DeliveryStatus,
    Message,
    MessageDirection,
    utcnow,
)
from .models.schemas import (
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
from .storage.base import MessageStore

logger = logging.getLogger(__name__)
audit_log = structlog.get_logger("relay.audit")

PII_BLOCK_REASON = (
    "Message contains potentially identifying information. "
    "Please acknowledge before sending."
)


class MessageRelayService:
    """Two-way anonymous messaging on a compliance case."""

    def __init__(
        self,
        engine: BaseDetector,
        store: MessageStore,
        case_lookup: CaseLookup,
        identity_resolver: IdentityResolver,
        dispatcher: NotificationDispatcher,
        event_bus: EventBus,
        settings: Optional[Settings] = None,
    ):
        self.engine = engine
        self.store = store
        self.case_lookup = case_lookup
        self.identity_resolver = identity_resolver
        self.dispatcher = dispatcher
        self.event_bus = event_bus
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Investigator -> reporter
    # ------------------------------------------------------------------

    def send_to_reporter(
        self, request: SendToReporterRequest, user_id: str, tenant_id: str
    ) -> Message:
        """Send a message to the reporter of a case.

        Outbound content is scanned for PII unless ``skip_pii_check`` is set.
        Findings block the send until the investigator acknowledges them.

        Raises:
            NotFoundError: If the case does not resolve in ``tenant_id``.
            PiiAcknowledgmentRequired: If PII was found and not acknowledged.
        """
        case = self._require_case(request.case_id, tenant_id)
        reporter = self.identity_resolver.resolve_for_case(case.id, tenant_id)

        if not request.skip_pii_check:
            self._enforce_pii_acknowledgment(request, user_id, case.id)

        message = self.store.add(
            Message.outbound(
                case_id=case.id,
                tenant_id=tenant_id,
                content=request.content,
                user_id=user_id,
                subject=request.subject,
            )
        )

        if reporter is not None and reporter.contact is not None:
            message = self._notify_reporter(message, case, reporter)
        else:
            logger.info(
                "No contact channel for case %s; reporter will see message %s on next check-in",
                case.id,
                message.id,
            )

        self._emit(
            AuditEvent(
                type="message.sent",
                tenant_id=tenant_id,
                case_id=case.id,
                message_id=message.id,
                actor=user_id,
                direction=MessageDirection.OUTBOUND.value,
            )
        )
        logger.info("Message %s sent to reporter on case %s", message.id, case.id)
        return message

    def _enforce_pii_acknowledgment(
        self, request: SendToReporterRequest, user_id: str, case_id: str
    ) -> None:
        result = self.engine.detect(request.content)
        if not result.has_pii:
            return

        acknowledged = request.acknowledged_pii_warnings or []
        if not acknowledged:
            raise PiiAcknowledgmentRequired(list(result.warnings))

        if self.settings.strict_acknowledgment:
            missing = [w for w in result.warnings if w not in acknowledged]
            if missing:
                raise PiiAcknowledgmentRequired(missing)

        logger.info(
            "Investigator %s acknowledged PII warnings for case %s", user_id, case_id
        )

    def _notify_reporter(
        self, message: Message, case: CaseRecord, reporter: ReporterRecord
    ) -> Message:
        """Queue the out-of-band alert. The job carries no message content."""
        job = NotificationJob(
            tenant_id=message.tenant_id,
            template_id=self.settings.notification_template_id,
            to=reporter.contact.address,
            context=NotificationContext(
                case_reference=case.reference_number,
                has_access_code=bool(reporter.access_code),
                status_check_url=self.settings.status_check_url(reporter.access_code),
            ),
        )
        options = JobOptions(
            attempts=self.settings.notification_attempts,
            backoff_type="exponential",
            backoff_delay_ms=self.settings.notification_backoff_delay_ms,
        )
        try:
            self.dispatcher.enqueue(self.settings.notification_job_name, job, options)
        except Exception:
            logger.exception(
                "Failed to queue reporter notification for message %s", message.id
            )
            return self.store.update_delivery_status(
                message.id, message.tenant_id, DeliveryStatus.FAILED
            )

        logger.info(
            "Queued reporter notification for case %s (contact not logged for privacy)",
            case.id,
        )
        return self.store.update_delivery_status(
            message.id, message.tenant_id, DeliveryStatus.SENT
        )

    # ------------------------------------------------------------------
    # Reporter -> investigator
    # ------------------------------------------------------------------

    def receive_from_reporter(self, request: ReceiveFromReporterRequest) -> Message:
        """Accept a message from an anonymous reporter.

        Inbound content is stored as written; it is never scanned or altered.

        Raises:
            NotFoundError: If the access code is unknown.
            CaseNotLinkedError: If the report has not been linked to a case yet.
        """
        reporter = self.identity_resolver.resolve_by_access_code(request.access_code)
        if reporter is None:
            raise NotFoundError("Invalid access code")
        if not reporter.linked_case_id:
            raise CaseNotLinkedError()

        message = self.store.add(
            Message.inbound(
                case_id=reporter.linked_case_id,
                tenant_id=reporter.tenant_id,
                content=request.content,
            )
        )

        self._emit(
            AuditEvent(
                type="message.received",
                tenant_id=reporter.tenant_id,
                case_id=reporter.linked_case_id,
                message_id=message.id,
                actor=None,
                direction=MessageDirection.INBOUND.value,
            )
        )
        logger.info(
            "Message %s received from reporter on case %s",
            message.id,
            reporter.linked_case_id,
        )
        return message

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_messages_for_investigator(
        self, case_id: str, user_id: str, tenant_id: str
    ) -> List[MessageView]:
        """All messages on a case. Unread inbound messages become read."""
        case = self._require_case(case_id, tenant_id)
        messages = self.store.list_for_case(case.id, tenant_id)

        unread = [
            m.id for m in messages
            if m.direction == MessageDirection.INBOUND and not m.is_read
        ]
        if unread:
            flipped = self.store.mark_read(unread, tenant_id, utcnow(), Authored(user_id))
            logger.debug("Marked %d inbound messages read on case %s", flipped, case.id)
            messages = self.store.list_for_case(case.id, tenant_id)

        return [MessageView.from_message(m) for m in messages]

    def get_messages_for_reporter(self, access_code: str) -> List[MessageView]:
        """All messages on the reporter's case. Unread outbound messages become read.

        A report not yet linked to a case has no conversation: returns ``[]``.
        """
        reporter = self.identity_resolver.resolve_by_access_code(access_code)
        if reporter is None:
            raise NotFoundError("Invalid access code")
        if not reporter.linked_case_id:
            return []

        case_id = reporter.linked_case_id
        messages = self.store.list_for_case(case_id, reporter.tenant_id)

        unread = [
            m.id for m in messages
            if m.direction == MessageDirection.OUTBOUND and not m.is_read
        ]
        if unread:
            self.store.mark_read(unread, reporter.tenant_id, utcnow(), ANONYMOUS)
            messages = self.store.list_for_case(case_id, reporter.tenant_id)

        return [MessageView.from_message(m) for m in messages]

    def get_unread_count(self, case_id: str, tenant_id: str) -> UnreadCount:
        case = self._require_case(case_id, tenant_id)
        return UnreadCount(
            inbound_unread=self.store.count(
                case.id, tenant_id, direction=MessageDirection.INBOUND, is_read=False
            ),
            outbound_unread=self.store.count(
                case.id, tenant_id, direction=MessageDirection.OUTBOUND, is_read=False
            ),
            total_messages=self.store.count(case.id, tenant_id),
        )

    def check_for_pii(self, content: str) -> PiiCheckResult:
        """Advisory pre-send check. Never blocks and never persists."""
        result = self.engine.detect(content)
        return PiiCheckResult(
            has_pii=result.has_pii,
            warnings=list(result.warnings),
            blocked=False,
            block_reason=PII_BLOCK_REASON if result.has_pii else None,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_case(self, case_id: str, tenant_id: str) -> CaseRecord:
        case = self.case_lookup.resolve_case(case_id, tenant_id)
        if case is None:
            raise NotFoundError(f"Case {case_id} not found")
        return case

    def _emit(self, event: AuditEvent) -> None:
        """Best-effort: a failing audit sink never fails the relay operation."""
        try:
            audit_log.info(
                event.type,
                tenant_id=event.tenant_id,
                case_id=event.case_id,
                message_id=event.message_id,
                actor=event.actor,
                direction=event.direction,
            )
        except Exception:
            logger.exception("Failed to log %s for message %s", event.type, event.message_id)
        try:
            self.event_bus.emit(event)
        except Exception:
            logger.exception("Failed to emit %s for message %s", event.type, event.message_id)
