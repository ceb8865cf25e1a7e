"""Shared pytest fixtures.

Everything runs in-process: in-memory collaborators, a recording dispatcher
and an in-memory message store unless a test asks for the SQL store.
"""

from typing import List

import pytest

from detection import PIIDetectionEngine
from relay.collaborators import (
    InMemoryCaseDirectory,
    InMemoryIdentityResolver,
    ReporterContact,
    ReporterRecord,
)
from relay.config import Settings
from relay.dispatch import QueuedJob
from relay.events import EventBus
from relay.service import MessageRelayService
from relay.storage import InMemoryMessageStore, SqlAlchemyMessageStore

TENANT = "tenant-a"
OTHER_TENANT = "tenant-b"
CASE_ID = "case-1"
CASE_REFERENCE = "CASE-2024-0001"
ACCESS_CODE = "ABC-123-XYZ"
UNLINKED_CODE = "UNLINKED-0001"
REPORTER_EMAIL = "whistle.blower@example.org"
INVESTIGATOR = "user-42"


class RecordingDispatcher:
    """Captures enqueued jobs; optionally fails every enqueue."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.jobs: List[QueuedJob] = []

    def enqueue(self, job_name, payload, options):
        if self.fail:
            raise RuntimeError("queue unavailable")
        self.jobs.append(QueuedJob(job_name=job_name, payload=payload, options=options))


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def engine() -> PIIDetectionEngine:
    return PIIDetectionEngine()


@pytest.fixture
def store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def sql_store(tmp_path) -> SqlAlchemyMessageStore:
    return SqlAlchemyMessageStore.from_url(f"sqlite:///{tmp_path / 'relay.db'}")


@pytest.fixture
def cases() -> InMemoryCaseDirectory:
    directory = InMemoryCaseDirectory()
    directory.add_case(TENANT, CASE_ID, CASE_REFERENCE)
    directory.add_case(TENANT, "case-no-contact", "CASE-2024-0002")
    return directory


@pytest.fixture
def resolver() -> InMemoryIdentityResolver:
    identities = InMemoryIdentityResolver()
    identities.register(
        ReporterRecord(
            record_id="report-1",
            tenant_id=TENANT,
            access_code=ACCESS_CODE,
            linked_case_id=CASE_ID,
            contact=ReporterContact(address=REPORTER_EMAIL),
        )
    )
    identities.register(
        ReporterRecord(
            record_id="report-2",
            tenant_id=TENANT,
            access_code=UNLINKED_CODE,
        )
    )
    identities.register(
        ReporterRecord(
            record_id="report-3",
            tenant_id=TENANT,
            access_code="NO-CONTACT-0003",
            linked_case_id="case-no-contact",
        )
    )
    return identities


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def relay(engine, store, cases, resolver, dispatcher, event_bus, settings) -> MessageRelayService:
    return MessageRelayService(
        engine=engine,
        store=store,
        case_lookup=cases,
        identity_resolver=resolver,
        dispatcher=dispatcher,
        event_bus=event_bus,
        settings=settings,
    )
