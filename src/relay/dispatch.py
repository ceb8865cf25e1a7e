"""Queue-backed notification dispatcher.

``enqueue`` only hands the job to an in-process queue and returns. Delivery
(and any retry policy described by ``JobOptions``) belongs to whatever handler
drains the queue.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from .models.schemas import JobOptions, NotificationJob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedJob:
    job_name: str
    payload: NotificationJob
    options: JobOptions


JobHandler = Callable[[QueuedJob], None]

_STOP = object()


class QueueNotificationDispatcher:
    """Non-blocking hand-off of notification jobs to a background worker."""

    def __init__(self, handler: Optional[JobHandler] = None, maxsize: int = 0):
        self.handler = handler
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._worker: Optional[threading.Thread] = None

    def enqueue(self, job_name: str, payload: NotificationJob, options: JobOptions) -> None:
        """Raises ``queue.Full`` when a bounded queue is saturated."""
        self._queue.put_nowait(QueuedJob(job_name=job_name, payload=payload, options=options))
        logger.debug("Queued %s job (template=%s)", job_name, payload.template_id)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self) -> List[QueuedJob]:
        """Remove and return every job currently queued, without handling it."""
        jobs = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return jobs
            self._queue.task_done()
            if item is not _STOP:
                jobs.append(item)

    def start(self) -> None:
        if self.handler is None:
            raise RuntimeError("A job handler is required to start the worker")
        if self._worker is not None and self._worker.is_alive():
            return
        self._worker = threading.Thread(
            target=self._run, name="notification-dispatcher", daemon=True
        )
        self._worker.start()
        logger.info("Notification worker started")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Finish the jobs already queued, then stop the worker."""
        if self._worker is None:
            return
        self._queue.put(_STOP)
        self._worker.join(timeout)
        self._worker = None
        logger.info("Notification worker stopped")

    def join(self) -> None:
        """Block until every queued job has been handled."""
        self._queue.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self.handler(item)
            except Exception:
                # Recipient is never logged
                logger.exception("Notification job %s failed", item.job_name)
            finally:
                self._queue.task_done()
