"""Encoder progress monitoring

Responsibilities:
- Read the latest complete line from a growing encoder log
- Parse frame and speed telemetry from ffmpeg status lines
- Convert frames to a percentage and emit non-decreasing samples
- Emit exactly one terminal 100% sample when the encoder exits
"""

import logging
import os
import re
import threading
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Tuple

from .config import POLL_INTERVAL, TAIL_WINDOW
from .models import ProgressSample

logger = logging.getLogger(__name__)

FRAME_PATTERN = re.compile(r"frame=\s*(\d+)")
SPEED_PATTERN = re.compile(r"speed=\s*(\S+)")

def read_last_line(stream: BinaryIO, window: int = TAIL_WINDOW) -> Optional[str]:
    """
    Return the last complete, non-blank line in the final window of a stream.

    A fragment cut by the window start and an unterminated trailing
    fragment are both ignored. Carriage returns count as line ends.
    """
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    start = max(0, size - window)
    stream.seek(start)
    text = stream.read(size - start).decode("utf-8", errors="replace")

    lines = text.splitlines(keepends=True)
    if start > 0 and lines:
        lines = lines[1:]

    for line in reversed(lines):
        content = line.rstrip("\r\n")
        if content == line:
            continue  # still being written
        content = content.strip()
        if content:
            return content
    return None

def parse_progress_line(line: Optional[str]) -> Optional[Tuple[int, str]]:
    """Extract (frame, speed) from an ffmpeg status line"""
    if not line or "frame=" not in line:
        return None
    frame_match = FRAME_PATTERN.search(line)
    speed_match = SPEED_PATTERN.search(line)
    if not frame_match or not speed_match:
        return None
    return int(frame_match.group(1)), speed_match.group(1).strip()

def compute_percentage(current_frame: int, total_frames: int) -> Optional[float]:
    """Percentage of total_frames encoded, capped at 100; None if total is unknown"""
    if total_frames <= 0:
        return None
    return min(current_frame / total_frames * 100, 100.0)

class ProgressMonitor:
    """
    Polls an encoder log on a background thread and reports progress.

    Samples reach on_sample in non-decreasing order. Values below 100 come
    from the log; the single 100% sample is emitted once the done signal
    is set by stop().
    """

    def __init__(
        self,
        log_path: Path,
        total_frames: int,
        on_sample: Callable[[ProgressSample], None],
        poll_interval: float = POLL_INTERVAL,
        window: int = TAIL_WINDOW,
    ):
        self.log_path = Path(log_path)
        self.total_frames = total_frames
        self.on_sample = on_sample
        self.poll_interval = poll_interval
        self.window = window
        self.last_percentage = 0.0
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._finished = False
        self._warned_unknown = False
        self._thread: Optional[threading.Thread] = None

    @property
    def finished(self) -> bool:
        return self._finished

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self.run,
            name=f"progress-{self.log_path.name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal that the encoder exited and wait for the terminal sample"""
        self._done.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Progress monitor did not stop within %ss", timeout)
        self._finish()

    def run(self) -> None:
        while not self._done.is_set():
            self.poll()
            self._done.wait(self.poll_interval)
        self._finish()

    def poll(self) -> Optional[ProgressSample]:
        """Run one tick; returns the sample emitted, if any"""
        try:
            with open(self.log_path, "rb") as stream:
                line = read_last_line(stream, self.window)
        except OSError as e:
            logger.debug("Cannot read encoder log %s: %s", self.log_path, e)
            return None

        parsed = parse_progress_line(line)
        if parsed is None:
            return None
        frame, speed = parsed

        percentage = compute_percentage(frame, self.total_frames)
        if percentage is None:
            if not self._warned_unknown:
                logger.info("Frame count unknown for %s, progress not reported", self.log_path.name)
                self._warned_unknown = True
            return None

        # 100% is reserved for the terminal sample
        if percentage >= 100.0 or percentage <= self.last_percentage:
            return None

        sample = ProgressSample(percentage=percentage, speed_factor=speed)
        with self._lock:
            if self._finished:
                return None
            self.last_percentage = percentage
            logger.debug("Progress: %.2f%%, speed: %s", percentage, speed)
            self.on_sample(sample)
        return sample

    def _finish(self) -> None:
        with self._lock:
            if self._finished:
                return
            self._finished = True
            self.last_percentage = 100.0
            self.on_sample(ProgressSample(percentage=100.0, speed_factor=""))
