"""
Conversion state models

Data containers shared across the pipeline:
- MediaDescriptor: immutable probe result for a source file
- Job: one queued conversion and its run-time status
- ProgressSample: a single percentage/speed reading
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

class JobStatus(Enum):
    """Status of a conversion job"""
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

@dataclass(frozen=True)
class MediaDescriptor:
    """
    Snapshot of a source file as reported by ffprobe.

    Attributes:
        path: Absolute path of the source file
        duration: Display timecode, HH:MM:SS:FF
        frame_count: Total frames of the first stream, 0 if unknown
        codec: Codec name of the first stream
        size: Human readable size ("12.34 MB")
    """
    path: Path
    duration: str
    frame_count: int
    codec: str
    size: str

@dataclass
class Job:
    """Represents a single conversion job"""
    media: MediaDescriptor
    destination: Path
    status: JobStatus = JobStatus.QUEUED
    output_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def source(self) -> Path:
        return self.media.path

    @property
    def total_frames(self) -> int:
        return self.media.frame_count

@dataclass(frozen=True)
class ProgressSample:
    """Progress information"""
    percentage: float
    speed_factor: str = ""
