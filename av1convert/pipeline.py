"""High-level pipeline orchestration for queued AV1 conversion

Responsibilities:
  - Probe submitted files and queue the usable ones.
  - Run the head job on a worker thread when the queue is idle.
  - Advance to the next job on every NEXT event, until the queue drains.
"""

import logging
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .encoder import ConversionSupervisor
from .events import Event, EventEmitter, EventType
from .exceptions import Av1ConvertError
from .job_queue import JobQueue
from .models import Job, JobStatus, MediaDescriptor
from .probe import ProbeBatch, probe_files

logger = logging.getLogger(__name__)

class ConversionPipeline:
    """
    Drives the queue one job at a time.

    Each job runs on its own worker thread. When a job ends, successfully
    or not, the running slot is freed and a NEXT event is emitted; the
    pipeline reacts to NEXT by starting the following job.
    """

    def __init__(
        self,
        supervisor: ConversionSupervisor,
        emitter: Optional[EventEmitter] = None,
        queue: Optional[JobQueue] = None,
        ffprobe_path: Union[str, Path] = "ffprobe",
    ):
        self.supervisor = supervisor
        self.emitter = emitter if emitter is not None else supervisor.emitter
        self.queue = queue if queue is not None else JobQueue()
        self.ffprobe_path = ffprobe_path
        self.finished: List[Job] = []
        self._lock = threading.Lock()
        self._drained = threading.Event()
        self._drained.set()
        self.emitter.on(EventType.NEXT, self._on_next)

    def add_files(self, paths: Iterable[Union[str, Path]], destination: Path) -> ProbeBatch:
        """Probe paths and queue every file that probed successfully"""
        batch = probe_files(paths, self.ffprobe_path)
        for path, message in batch.failures.items():
            logger.warning("Skipping %s: %s", path, message)
        self.enqueue(batch.descriptors, destination)
        return batch

    def enqueue(self, descriptors: Iterable[MediaDescriptor], destination: Path) -> List[Job]:
        jobs = [Job(media=descriptor, destination=Path(destination)) for descriptor in descriptors]
        if jobs:
            self.queue.enqueue(jobs)
        return jobs

    def start(self) -> bool:
        """Start the head job unless one is already running"""
        return self._advance()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the queue is drained; False on timeout"""
        return self._drained.wait(timeout)

    @property
    def failed(self) -> List[Job]:
        return [job for job in self.finished if job.status is JobStatus.FAILED]

    def _advance(self) -> bool:
        # drained is decided and flipped under one lock
        with self._lock:
            job, idle = self.queue.advance_or_idle()
            if job is None:
                if idle:
                    logger.info("Queue drained")
                    self._drained.set()
                return False
            self._drained.clear()

        worker = threading.Thread(
            target=self._run_job,
            args=(job,),
            name=f"encode-{job.source.name}",
            daemon=True,
        )
        worker.start()
        return True

    def _run_job(self, job: Job) -> None:
        succeeded = False
        try:
            self.supervisor.convert(job)
            succeeded = True
        except Av1ConvertError:
            pass  # already reported by the supervisor
        except Exception as e:
            logger.exception("Unexpected error converting %s", job.source)
            job.error = str(e)
            self.emitter.emit(
                EventType.ERROR,
                {"message": str(e), "input_path": str(job.source)},
                source="pipeline"
            )
        finally:
            self.queue.complete(job, succeeded)
            self.finished.append(job)
            self.emitter.emit(EventType.NEXT, {}, source="pipeline")

    def _on_next(self, event: Event) -> None:
        self._advance()
