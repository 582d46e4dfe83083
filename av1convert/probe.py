"""Media probing via ffprobe

Responsibilities:
- Run ffprobe on a source file and parse its JSON report
- Build the display timecode and size strings
- Probe batches of files, collecting per-file failures
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import ffmpeg

from .exceptions import ProbeError
from .models import MediaDescriptor
from .utils import format_size_mb

logger = logging.getLogger(__name__)

@dataclass
class ProbeBatch:
    """Result of probing several files"""
    descriptors: List[MediaDescriptor] = field(default_factory=list)
    failures: Dict[Path, str] = field(default_factory=dict)

def _parse_float(value: Any) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0

def parse_frame_rate(value: Any) -> float:
    """Parse an ffprobe rate such as "30000/1001" or "25" into frames per second"""
    if isinstance(value, str) and "/" in value:
        numerator, _, denominator = value.partition("/")
        den = _parse_float(denominator)
        if den == 0:
            return 0.0
        rate = _parse_float(numerator) / den
        return rate if math.isfinite(rate) else 0.0
    return _parse_float(value)

def build_timecode(duration: float, frame_rate: float) -> str:
    """
    Format a duration in seconds as HH:MM:SS:FF.

    The frame field is the fractional second scaled by the frame rate,
    so the result is for display only.
    """
    whole = int(duration)
    hours = whole // 3600
    minutes = (whole % 3600) // 60
    seconds = whole % 60
    frames = int((duration - whole) * frame_rate)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}:{frames:02d}"

def parse_probe_data(path: Path, data: Dict[str, Any]) -> MediaDescriptor:
    """
    Build a MediaDescriptor from ffprobe's JSON report.

    Raises:
        ProbeError: If the report is malformed or contains no streams
    """
    if not isinstance(data, dict):
        raise ProbeError("Unexpected FFprobe output", path=path)

    streams = data.get("streams") or []
    fmt = data.get("format") or {}
    if not isinstance(streams, list) or not isinstance(fmt, dict):
        raise ProbeError("Unexpected FFprobe output", path=path)
    if not streams:
        raise ProbeError("No streams found in the video file", path=path)
    if not all(isinstance(stream, dict) for stream in streams):
        raise ProbeError("Unexpected FFprobe output", path=path)

    stream = streams[0]

    duration = _parse_float(fmt.get("duration"))
    frame_rate = parse_frame_rate(stream.get("avg_frame_rate"))
    try:
        frame_count = int(stream.get("nb_frames"))
    except (TypeError, ValueError, OverflowError):
        frame_count = 0

    return MediaDescriptor(
        path=path,
        duration=build_timecode(duration, frame_rate),
        frame_count=max(frame_count, 0),
        codec=stream.get("codec_name") or "",
        size=format_size_mb(_parse_float(fmt.get("size"))),
    )

def probe_media(path: Union[str, Path], ffprobe_path: Union[str, Path] = "ffprobe") -> MediaDescriptor:
    """
    Probe a single media file.

    Args:
        path: Source file
        ffprobe_path: ffprobe executable to run

    Returns:
        MediaDescriptor for the file

    Raises:
        ProbeError: If the file is missing, ffprobe fails, its output is not
            valid JSON, or it reports no streams
    """
    path = Path(path).absolute()
    if not path.exists():
        raise ProbeError(f"File does not exist: {path}", path=path)

    try:
        data = ffmpeg.probe(str(path), cmd=str(ffprobe_path), v="quiet")
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
        logger.error("FFprobe failed for %s", path)
        logger.error("FFprobe stderr: %s", stderr)
        raise ProbeError(f"FFprobe error: {stderr.strip() or e}", path=path, stderr=stderr) from e
    except ValueError as e:
        logger.error("Could not parse FFprobe output for %s: %s", path, e)
        raise ProbeError(f"Invalid FFprobe output: {e}", path=path) from e
    except OSError as e:
        raise ProbeError(f"Failed to run FFprobe: {e}", path=path) from e

    return parse_probe_data(path, data)

def probe_files(paths: Iterable[Union[str, Path]], ffprobe_path: Union[str, Path] = "ffprobe") -> ProbeBatch:
    """Probe every path; failures are logged and recorded, never raised"""
    batch = ProbeBatch()
    for path in paths:
        logger.info("Processing file: %s", path)
        try:
            descriptor = probe_media(path, ffprobe_path)
        except ProbeError as e:
            logger.warning("Error getting info for %s: %s", path, e.message)
            batch.failures[Path(path)] = e.message
            continue
        batch.descriptors.append(descriptor)
        logger.info("Successfully processed file: %s", path)
    return batch
