"""Unit tests for the sequential job queue"""

import threading
import unittest
from pathlib import Path

from av1convert.exceptions import QueueError
from av1convert.job_queue import JobQueue
from av1convert.models import JobStatus

from conftest import make_job

class TestJobQueue(unittest.TestCase):
    """Test cases for queue advancement and mutation"""
    def setUp(self):
        self.queue = JobQueue()
        self.a = make_job("/videos/A.mkv", "/out")
        self.b = make_job("/videos/B.mkv", "/out")
        self.c = make_job("/videos/C.mkv", "/out")

    def test_advance_starts_head_once(self):
        self.queue.enqueue([self.a, self.b])
        job, started = self.queue.advance()
        self.assertTrue(started)
        self.assertIs(job, self.a)
        self.assertEqual(self.a.status, JobStatus.RUNNING)

        # A second call while A runs is a no-op
        self.assertEqual(self.queue.advance(), (None, False))
        self.assertIs(self.queue.current, self.a)
        self.assertEqual(len(self.queue), 1)

    def test_advance_or_idle_reports_idle(self):
        self.assertEqual(self.queue.advance_or_idle(), (None, True))
        self.queue.enqueue([self.a, self.b])
        self.assertEqual(self.queue.advance_or_idle(), (self.a, False))
        # B is pending and A is running
        self.assertEqual(self.queue.advance_or_idle(), (None, False))
        self.queue.complete(self.a, succeeded=True)
        self.queue.advance()
        self.queue.complete(self.b, succeeded=True)
        self.assertEqual(self.queue.advance_or_idle(), (None, True))

    def test_advance_on_empty_queue(self):
        self.assertEqual(self.queue.advance(), (None, False))
        self.assertFalse(self.queue.is_running)

    def test_complete_then_advance(self):
        self.queue.enqueue([self.a, self.b])
        self.queue.advance()
        self.queue.complete(self.a, succeeded=True)
        self.assertEqual(self.a.status, JobStatus.COMPLETED)
        self.assertIsNone(self.queue.current)

        job, started = self.queue.advance()
        self.assertTrue(started)
        self.assertIs(job, self.b)

    def test_failed_job_frees_slot(self):
        self.queue.enqueue([self.a])
        self.queue.advance()
        self.queue.complete(self.a, succeeded=False)
        self.assertEqual(self.a.status, JobStatus.FAILED)
        self.assertFalse(self.queue.is_running)

    def test_complete_wrong_job(self):
        self.queue.enqueue([self.a, self.b])
        self.queue.advance()
        with self.assertRaises(QueueError):
            self.queue.complete(self.b, succeeded=True)

    def test_same_path_queued_twice(self):
        twin = make_job("/videos/A.mkv", "/out")
        self.queue.enqueue([self.a, twin])
        self.assertEqual(len(self.queue), 2)

    def test_remove_and_move(self):
        self.queue.enqueue([self.a, self.b, self.c])
        self.queue.move(2, 0)
        self.assertEqual(self.queue.pending(), [self.c, self.a, self.b])
        removed = self.queue.remove(1)
        self.assertIs(removed, self.a)
        self.assertEqual(self.queue.pending(), [self.c, self.b])

    def test_bad_index(self):
        self.queue.enqueue([self.a])
        with self.assertRaises(QueueError):
            self.queue.remove(3)
        with self.assertRaises(QueueError):
            self.queue.move(0, -1)

    def test_running_job_cannot_be_removed(self):
        self.queue.enqueue([self.a])
        self.queue.advance()
        with self.assertRaises(QueueError):
            self.queue.remove(0)
        self.assertEqual(self.queue.clear(), [])
        self.assertIs(self.queue.current, self.a)

    def test_concurrent_advance_starts_one_job(self):
        jobs = [make_job(f"/videos/{i}.mkv", "/out") for i in range(5)]
        self.queue.enqueue(jobs)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(self.queue.advance()[1])

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(results.count(True), 1)
        self.assertEqual(len(self.queue), 4)
        running = [job for job in jobs if job.status == JobStatus.RUNNING]
        self.assertEqual(running, [jobs[0]])

if __name__ == "__main__":
    unittest.main()
