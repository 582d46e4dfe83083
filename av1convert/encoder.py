"""SVT-AV1 conversion of a single job

This module runs ffmpeg for one queued job:
- Derives the output path and prepares the destination and log file
- Launches ffmpeg with the fixed AV1 policy, logging to a file
- Runs a ProgressMonitor over that log while the encoder works
- Reports completion or failure through the event emitter
"""

import logging
import subprocess
import time
from pathlib import Path
from typing import List, Union

import ffmpeg

from .config import (
    AUDIO_CODEC, CRF, ENCODER_LOG_SUFFIX, LOG_DIR, OUTPUT_SUFFIX,
    POLL_INTERVAL, PRESET, SETTLE_DELAY, SVT_PARAMS, VIDEO_CODEC
)
from .events import EventEmitter, EventType
from .exceptions import Av1ConvertError, DirectoryError, EncodeError, LogCreateError
from .models import Job, ProgressSample
from .monitor import ProgressMonitor
from .utils import sanitize_file_name

logger = logging.getLogger(__name__)

def output_stem(input_file: Path) -> str:
    """Sanitized base name of the source, without extension"""
    return sanitize_file_name(Path(input_file).stem)

def build_output_path(input_file: Path, destination: Path) -> Path:
    """Destination path for the converted file"""
    return Path(destination) / f"{output_stem(input_file)}{OUTPUT_SUFFIX}"

def build_encode_command(
    input_file: Path,
    output_file: Path,
    ffmpeg_path: Union[str, Path] = "ffmpeg"
) -> List[str]:
    """Build the ffmpeg command for the fixed SVT-AV1 preset"""
    stream = ffmpeg.input(str(input_file)).output(
        str(output_file),
        crf=CRF,
        preset=PRESET,
        **{
            "c:v": VIDEO_CODEC,
            "svtav1-params": SVT_PARAMS,
            "c:a": AUDIO_CODEC,
        }
    )
    return stream.overwrite_output().compile(cmd=str(ffmpeg_path))

class ConversionSupervisor:
    """Runs and supervises ffmpeg for one job at a time."""

    def __init__(
        self,
        emitter: EventEmitter,
        ffmpeg_path: Union[str, Path] = "ffmpeg",
        log_dir: Path = LOG_DIR,
        poll_interval: float = POLL_INTERVAL,
        settle_delay: float = SETTLE_DELAY,
    ):
        self.emitter = emitter
        self.ffmpeg_path = ffmpeg_path
        self.log_dir = Path(log_dir)
        self.poll_interval = poll_interval
        self.settle_delay = settle_delay

    def convert(self, job: Job) -> Path:
        """
        Convert the job's source file.

        Emits PROGRESS samples while encoding, then COMPLETION on success
        or ERROR on failure.

        Returns:
            Path to the converted file

        Raises:
            DirectoryError: If the destination cannot be created
            LogCreateError: If the encoder log cannot be created
            EncodeError: If ffmpeg fails to start or exits non-zero
        """
        try:
            output_path = self._convert(job)
        except Av1ConvertError as e:
            job.error = e.message
            logger.error("Conversion failed for %s: %s", job.source.name, e.message)
            self.emitter.emit(
                EventType.ERROR,
                {"message": e.message, "input_path": str(job.source)},
                source="encoder"
            )
            raise

        self.emitter.emit(
            EventType.COMPLETION,
            {"output_path": str(output_path), "input_path": str(job.source)},
            source="encoder"
        )
        logger.info("Conversion completed: %s", output_path)
        return output_path

    def _convert(self, job: Job) -> Path:
        output_path = build_output_path(job.source, job.destination)
        job.output_path = output_path

        try:
            Path(job.destination).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(f"Failed to create output directory: {e}", module="encoder") from e

        log_path = self.log_dir / f"{output_stem(job.source)}{ENCODER_LOG_SUFFIX}"
        try:
            log_file = open(log_path, "wb")
        except OSError as e:
            raise LogCreateError(f"Failed to create log file: {e}", module="encoder") from e

        cmd = build_encode_command(job.source, output_path, self.ffmpeg_path)
        logger.info("Running ffmpeg command:\n%s", " \\\n    ".join(cmd))

        with log_file:
            try:
                process = subprocess.Popen(cmd, stdout=log_file, stderr=subprocess.STDOUT)
            except OSError as e:
                raise EncodeError(f"Failed to start FFmpeg: {e}") from e

            monitor = ProgressMonitor(
                log_path,
                job.total_frames,
                on_sample=self._emit_progress,
                poll_interval=self.poll_interval,
            )
            monitor.start()
            try:
                returncode = process.wait()
            finally:
                monitor.stop()

        if returncode != 0:
            raise EncodeError(f"FFmpeg exited with code {returncode} (see {log_path})", exit_code=returncode)

        # Let the final sample reach the presentation layer first
        if self.settle_delay > 0:
            time.sleep(self.settle_delay)
        return output_path

    def _emit_progress(self, sample: ProgressSample) -> None:
        self.emitter.emit(
            EventType.PROGRESS,
            {"percentage": sample.percentage, "speed_factor": sample.speed_factor},
            source="monitor"
        )
