"""Tests for the queue-driven conversion pipeline."""
import threading
from pathlib import Path

import pytest

from av1convert.encoder import ConversionSupervisor
from av1convert.events import EventType
from av1convert.job_queue import JobQueue
from av1convert.models import JobStatus
from av1convert.pipeline import ConversionPipeline
from av1convert.probe import ProbeBatch

from conftest import make_media

@pytest.fixture
def pipeline(tmp_path, emitter, recorder):
    # recorder is registered first so it sees NEXT before the pipeline reacts
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    supervisor = ConversionSupervisor(
        emitter, log_dir=log_dir, poll_interval=0.01, settle_delay=0
    )
    return ConversionPipeline(supervisor, emitter)

@pytest.fixture
def popen(mocker):
    mock_popen = mocker.patch("av1convert.encoder.subprocess.Popen")
    mock_popen.return_value.wait.return_value = 0
    return mock_popen

def test_two_jobs_run_in_order(pipeline, recorder, popen, tmp_path):
    """Completion of A precedes the first next event, then B runs."""
    dest = tmp_path / "out"
    a, b = pipeline.enqueue(
        [make_media("/videos/A.mkv", 100), make_media("/videos/B.mkv", 50)], dest
    )

    assert pipeline.start() is True
    assert pipeline.wait(10)

    assert a.status == JobStatus.COMPLETED
    assert b.status == JobStatus.COMPLETED
    assert a.output_path == dest / "A_av1.mp4"
    assert b.output_path == dest / "B_av1.mp4"

    lifecycle = [
        (e.type, e.data.get("input_path"))
        for e in recorder.events
        if e.type is not EventType.PROGRESS
    ]
    assert lifecycle == [
        (EventType.COMPLETION, "/videos/A.mkv"),
        (EventType.NEXT, None),
        (EventType.COMPLETION, "/videos/B.mkv"),
        (EventType.NEXT, None),
    ]
    terminal = [e for e in recorder.of_type(EventType.PROGRESS) if e.data["percentage"] == 100.0]
    assert len(terminal) == 2

    first_next = recorder.types.index(EventType.NEXT)
    assert recorder.types[first_next - 1] is EventType.COMPLETION
    assert popen.call_count == 2
    assert "/videos/B.mkv" in popen.call_args_list[1][0][0]

def test_failed_job_still_advances(pipeline, recorder, popen, tmp_path):
    popen.return_value.wait.side_effect = [1, 0]
    a, b = pipeline.enqueue(
        [make_media("/videos/A.mkv"), make_media("/videos/B.mkv")], tmp_path / "out"
    )

    pipeline.start()
    assert pipeline.wait(10)

    assert a.status == JobStatus.FAILED
    assert b.status == JobStatus.COMPLETED
    assert pipeline.failed == [a]
    lifecycle = [e.type for e in recorder.events if e.type is not EventType.PROGRESS]
    assert lifecycle == [EventType.ERROR, EventType.NEXT, EventType.COMPLETION, EventType.NEXT]

def test_unexpected_error_reported(pipeline, recorder, mocker, tmp_path):
    mocker.patch.object(pipeline.supervisor, "convert", side_effect=RuntimeError("boom"))
    (job,) = pipeline.enqueue([make_media("/videos/A.mkv")], tmp_path / "out")

    pipeline.start()
    assert pipeline.wait(10)

    assert job.status == JobStatus.FAILED
    assert job.error == "boom"
    error = recorder.of_type(EventType.ERROR)[0]
    assert error.source == "pipeline"
    assert error.data == {"message": "boom", "input_path": "/videos/A.mkv"}
    assert recorder.types[-1] is EventType.NEXT

def test_start_is_idempotent(pipeline, tmp_path):
    assert pipeline.start() is False
    assert pipeline.wait(0)

    pipeline.enqueue([make_media("/videos/A.mkv")], tmp_path)
    pipeline.queue.advance()  # simulate a job already running
    assert pipeline.start() is False

def test_add_files_queues_probed_files(pipeline, mocker, tmp_path):
    good = make_media("/videos/A.mkv")
    mock_probe = mocker.patch(
        "av1convert.pipeline.probe_files",
        return_value=ProbeBatch([good], {Path("/videos/bad.mkv"): "No streams found in the video file"}),
    )

    batch = pipeline.add_files(["/videos/A.mkv", "/videos/bad.mkv"], tmp_path)

    mock_probe.assert_called_once_with(["/videos/A.mkv", "/videos/bad.mkv"], "ffprobe")
    assert len(batch.failures) == 1
    pending = pipeline.queue.pending()
    assert [job.media for job in pending] == [good]
    assert pending[0].destination == tmp_path

def test_injected_queue_is_used(emitter, popen, tmp_path):
    queue = JobQueue()
    supervisor = ConversionSupervisor(emitter, log_dir=tmp_path, poll_interval=0.01, settle_delay=0)
    pipeline = ConversionPipeline(supervisor, emitter, queue=queue)
    assert pipeline.queue is queue

    (job,) = pipeline.enqueue([make_media("/videos/A.mkv")], tmp_path / "out")
    assert queue.pending() == [job]
    pipeline.start()
    assert pipeline.wait(10)
    assert job.status == JobStatus.COMPLETED

class InterleavingQueue(JobQueue):
    """Runs a callback right after the idle decision, before the pipeline acts on it"""

    def __init__(self):
        super().__init__()
        self.after_decision = None

    def advance_or_idle(self):
        result = super().advance_or_idle()
        callback, self.after_decision = self.after_decision, None
        if callback is not None:
            callback()
        return result

def test_concurrent_start_is_not_reported_drained(emitter, mocker, tmp_path):
    queue = InterleavingQueue()
    supervisor = ConversionSupervisor(emitter, log_dir=tmp_path, settle_delay=0)
    pipeline = ConversionPipeline(supervisor, emitter, queue=queue)
    release = threading.Event()
    mocker.patch.object(supervisor, "convert", side_effect=lambda job: release.wait(10))

    def enqueue_and_start():
        pipeline.enqueue([make_media("/videos/B.mkv")], tmp_path)
        pipeline.start()

    other = threading.Thread(target=enqueue_and_start)

    def race():
        other.start()
        other.join(0.2)

    queue.after_decision = race
    assert pipeline.start() is False
    other.join(5)

    assert queue.current is not None
    assert queue.current.status == JobStatus.RUNNING
    assert pipeline.wait(0) is False

    release.set()
    assert pipeline.wait(10)
