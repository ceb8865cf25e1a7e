"""Unit tests for QueueNotificationDispatcher."""

import logging
import queue
import threading

import pytest

from relay.dispatch import QueueNotificationDispatcher
from relay.models import JobOptions, NotificationContext, NotificationJob


def _job(reference: str = "CASE-1") -> NotificationJob:
    return NotificationJob(
        tenant_id="tenant-a",
        template_id="case-message-notification",
        to="reporter@example.org",
        context=NotificationContext(case_reference=reference, has_access_code=True),
    )


class TestEnqueue:
    def test_enqueue_does_not_block(self):
        dispatcher = QueueNotificationDispatcher()
        dispatcher.enqueue("send-notification", _job(), JobOptions())
        assert dispatcher.pending == 1

    def test_drain_returns_jobs_in_order(self):
        dispatcher = QueueNotificationDispatcher()
        dispatcher.enqueue("send-notification", _job("A"), JobOptions())
        dispatcher.enqueue("send-notification", _job("B"), JobOptions(attempts=5))
        jobs = dispatcher.drain()
        assert [j.payload.context.case_reference for j in jobs] == ["A", "B"]
        assert jobs[1].options.attempts == 5
        assert dispatcher.pending == 0

    def test_bounded_queue_raises_when_full(self):
        dispatcher = QueueNotificationDispatcher(maxsize=1)
        dispatcher.enqueue("send-notification", _job(), JobOptions())
        with pytest.raises(queue.Full):
            dispatcher.enqueue("send-notification", _job(), JobOptions())


class TestWorker:
    def test_start_requires_handler(self):
        with pytest.raises(RuntimeError):
            QueueNotificationDispatcher().start()

    def test_worker_hands_jobs_to_handler(self):
        handled = []
        dispatcher = QueueNotificationDispatcher(handler=handled.append)
        dispatcher.start()
        try:
            dispatcher.enqueue("send-notification", _job("A"), JobOptions())
            dispatcher.enqueue("send-notification", _job("B"), JobOptions())
            dispatcher.join()
        finally:
            dispatcher.stop(timeout=5)
        assert [j.payload.context.case_reference for j in handled] == ["A", "B"]

    def test_handler_failure_is_logged_and_worker_continues(self, caplog):
        handled = []

        def handler(job):
            if job.payload.context.case_reference == "BAD":
                raise ConnectionError("smtp down")
            handled.append(job)

        dispatcher = QueueNotificationDispatcher(handler=handler)
        with caplog.at_level(logging.ERROR):
            dispatcher.start()
            try:
                dispatcher.enqueue("send-notification", _job("BAD"), JobOptions())
                dispatcher.enqueue("send-notification", _job("GOOD"), JobOptions())
                dispatcher.join()
            finally:
                dispatcher.stop(timeout=5)

        assert [j.payload.context.case_reference for j in handled] == ["GOOD"]
        assert "Notification job send-notification failed" in caplog.text
        assert "reporter@example.org" not in caplog.text

    def test_stop_finishes_queued_jobs(self):
        release = threading.Event()
        handled = []

        def handler(job):
            release.wait(timeout=5)
            handled.append(job)

        dispatcher = QueueNotificationDispatcher(handler=handler)
        dispatcher.start()
        dispatcher.enqueue("send-notification", _job("A"), JobOptions())
        dispatcher.enqueue("send-notification", _job("B"), JobOptions())
        release.set()
        dispatcher.stop(timeout=5)
        assert len(handled) == 2

    def test_stop_without_start_is_noop(self):
        QueueNotificationDispatcher().stop()
