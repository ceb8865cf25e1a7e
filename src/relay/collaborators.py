"""Interfaces the relay consumes, plus in-memory implementations.

Case lookup and identity resolution are owned by other subsystems. The relay
only ever receives a resolved ``CaseRecord`` or ``ReporterRecord``; contact
data is held on ``ReporterContact`` and leaves this boundary only inside a
``NotificationJob`` addressed to the reporter.
"""

import threading
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Protocol, Tuple

from .models.schemas import JobOptions, NotificationJob


@dataclass(frozen=True)
class CaseRecord:
    id: str
    reference_number: str


@dataclass(frozen=True)
class ReporterContact:
    """Private contact channel of a reporter. Excluded from repr."""

    address: str = field(repr=False)
    channel: str = "email"


@dataclass(frozen=True)
class ReporterRecord:
    """The reporter-facing record (intake report) behind an access code."""

    record_id: str
    tenant_id: str
    access_code: Optional[str] = field(default=None, repr=False)
    linked_case_id: Optional[str] = None
    contact: Optional[ReporterContact] = None


class CaseLookup(Protocol):
    def resolve_case(self, case_id: str, tenant_id: str) -> Optional[CaseRecord]:
        ...


class IdentityResolver(Protocol):
    def resolve_by_access_code(self, code: str) -> Optional[ReporterRecord]:
        ...

    def resolve_for_case(self, case_id: str, tenant_id: str) -> Optional[ReporterRecord]:
        ...


class NotificationDispatcher(Protocol):
    def enqueue(self, job_name: str, payload: NotificationJob, options: JobOptions) -> None:
        ...


class InMemoryCaseDirectory:
    """Tenant-scoped case lookup backed by a dict."""

    def __init__(self):
        self._cases: Dict[Tuple[str, str], CaseRecord] = {}
        self._lock = threading.Lock()

    def add_case(self, tenant_id: str, case_id: str, reference_number: str) -> CaseRecord:
        record = CaseRecord(id=case_id, reference_number=reference_number)
        with self._lock:
            self._cases[(tenant_id, case_id)] = record
        return record

    def resolve_case(self, case_id: str, tenant_id: str) -> Optional[CaseRecord]:
        with self._lock:
            return self._cases.get((tenant_id, case_id))


class InMemoryIdentityResolver:
    """Access-code and case-link resolution backed by registered records."""

    def __init__(self):
        self._records: List[ReporterRecord] = []
        self._lock = threading.Lock()

    def register(self, record: ReporterRecord) -> ReporterRecord:
        with self._lock:
            self._records = [r for r in self._records if r.record_id != record.record_id]
            self._records.append(record)
        return record

    def link_case(self, record_id: str, case_id: str) -> ReporterRecord:
        """Attach a triaged report to its case."""
        with self._lock:
            for i, r in enumerate(self._records):
                if r.record_id == record_id:
                    linked = replace(r, linked_case_id=case_id)
                    self._records[i] = linked
                    return linked
        raise KeyError(record_id)

    def resolve_by_access_code(self, code: str) -> Optional[ReporterRecord]:
        if not code:
            return None
        with self._lock:
            for r in self._records:
                if r.access_code == code:
                    return r
        return None

    def resolve_for_case(self, case_id: str, tenant_id: str) -> Optional[ReporterRecord]:
        """Primary record for a case: the first one linked to it."""
        with self._lock:
            for r in self._records:
                if r.linked_case_id == case_id and r.tenant_id == tenant_id:
                    return r
        return None
