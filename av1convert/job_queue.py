"""Sequential conversion queue

Holds the pending jobs and the single running job. Every operation is
serialized by one lock so that at most one job is ever RUNNING.
"""

import logging
import threading
from collections import deque
from typing import Iterable, List, Optional, Tuple

from .exceptions import QueueError
from .models import Job, JobStatus

logger = logging.getLogger(__name__)

class JobQueue:
    """FIFO queue of conversion jobs with a single in-flight slot."""

    def __init__(self) -> None:
        self._pending = deque()
        self._current: Optional[Job] = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def current(self) -> Optional[Job]:
        """The running job, if any"""
        with self._lock:
            return self._current

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._current is not None

    def pending(self) -> List[Job]:
        """Snapshot of the queued jobs, head first"""
        with self._lock:
            return list(self._pending)

    def enqueue(self, jobs: Iterable[Job]) -> None:
        """Append jobs to the tail of the queue"""
        jobs = list(jobs)
        with self._lock:
            for job in jobs:
                job.status = JobStatus.QUEUED
                self._pending.append(job)
            size = len(self._pending)
        logger.info("Queued %d job(s), %d pending", len(jobs), size)

    def advance(self) -> Tuple[Optional[Job], bool]:
        """
        Start the next job if nothing is running.

        Returns:
            (job, True) when the head job was started, otherwise (None, False)
        """
        job, _ = self.advance_or_idle()
        return job, job is not None

    def advance_or_idle(self) -> Tuple[Optional[Job], bool]:
        """
        Start the next job if nothing is running, reporting idleness atomically.

        Returns:
            (job, False) when the head job was started, otherwise
            (None, idle) where idle means nothing is running or pending
        """
        with self._lock:
            if self._current is not None or not self._pending:
                return None, self._current is None and not self._pending
            job = self._pending.popleft()
            job.status = JobStatus.RUNNING
            self._current = job
        logger.info("Starting job: %s", job.source)
        return job, False

    def complete(self, job: Job, succeeded: bool) -> None:
        """
        Finish the running job and free the slot.

        Raises:
            QueueError: If job is not the running job
        """
        with self._lock:
            if self._current is not job:
                raise QueueError(f"Job is not running: {job.source}", module="job_queue")
            job.status = JobStatus.COMPLETED if succeeded else JobStatus.FAILED
            self._current = None
        logger.info("Job %s: %s", job.status.value, job.source)

    def remove(self, index: int) -> Job:
        """Remove a queued job by position"""
        with self._lock:
            self._check_index(index)
            job = self._pending[index]
            del self._pending[index]
        logger.info("Removed queued job: %s", job.source)
        return job

    def move(self, from_index: int, to_index: int) -> None:
        """Move a queued job to another position"""
        with self._lock:
            self._check_index(from_index)
            self._check_index(to_index)
            job = self._pending[from_index]
            del self._pending[from_index]
            self._pending.insert(to_index, job)

    def clear(self) -> List[Job]:
        """Drop all queued jobs; the running job is untouched"""
        with self._lock:
            dropped = list(self._pending)
            self._pending.clear()
        return dropped

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._pending):
            raise QueueError(f"No queued job at index {index}", module="job_queue")
