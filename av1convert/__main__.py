"""
Command-line interface for the av1convert conversion queue
"""
import argparse
import logging
import sys
from pathlib import Path

from rich.markup import escape

from . import __version__
from .config import LOG_DIR, LOG_LEVEL
from .encoder import ConversionSupervisor
from .events import Event, EventEmitter, EventType
from .exceptions import Av1ConvertError, StartupFatalError
from .formatting import (
    create_progress, print_check, print_error, print_header, print_info, print_queue,
    print_success, print_warning
)
from .logging import cleanup_logs, configure_logging
from .pipeline import ConversionPipeline
from .preferences import Preferences
from .utils import collect_video_files, locate_tools

def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Convert video files to AV1 (SVT-AV1, MP4), one at a time"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (default from config: %s)" % LOG_LEVEL
    )
    parser.add_argument(
        "--dest",
        type=Path,
        default=None,
        help="Destination folder (default: last used folder, then ~/Desktop)"
    )
    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="Video files or directories of video files to convert"
    )
    return parser.parse_args(argv)

class ProgressView:
    """Renders pipeline events onto a rich progress display."""

    def __init__(self, pipeline: ConversionPipeline, progress):
        self.pipeline = pipeline
        self.progress = progress
        self.tasks = {}

    def attach(self, emitter: EventEmitter) -> None:
        emitter.on(EventType.PROGRESS, self.on_progress)
        emitter.on(EventType.COMPLETION, self.on_completion)
        emitter.on(EventType.ERROR, self.on_error)

    def add_job(self, job) -> None:
        # keyed by job, the same file may be queued twice
        self.tasks[id(job)] = self.progress.add_task(
            job.source.name, total=100, start=False, speed=""
        )

    def current_task(self):
        """Progress row of the running job; events arrive before it is completed"""
        job = self.pipeline.queue.current
        return self.tasks.get(id(job)) if job is not None else None

    def on_progress(self, event: Event) -> None:
        task_id = self.current_task()
        if task_id is None:
            return
        self.progress.start_task(task_id)
        self.progress.update(
            task_id,
            completed=event.data["percentage"],
            speed=event.data["speed_factor"]
        )

    def on_completion(self, event: Event) -> None:
        task_id = self.current_task()
        if task_id is not None:
            self.progress.update(task_id, completed=100, speed="done")
        self.progress.console.print(f"[green]✓ Saved {escape(event.data['output_path'])}")

    def on_error(self, event: Event) -> None:
        task_id = self.current_task()
        if task_id is not None:
            self.progress.update(task_id, speed="[red]failed")
        self.progress.console.print(
            f"[bold red]✗ {escape(Path(event.data['input_path']).name)}: {escape(event.data['message'])}"
        )

def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)
    try:
        configure_logging(args.log_level or LOG_LEVEL, LOG_DIR)
    except StartupFatalError as e:
        print_error(str(e))
        return 1

    log = logging.getLogger("av1convert")
    print_header(f"Starting av1convert v{__version__}")
    cleanup_logs(LOG_DIR)

    try:
        ffmpeg_path, ffprobe_path = locate_tools()
        preferences = Preferences()
        preferences.load()
        destination = preferences.confirm_destination(args.dest)
    except Av1ConvertError as e:
        log.error("%s", e)
        print_error(e.message)
        return 1

    print_check(f"FFmpeg: {ffmpeg_path}")
    print_check(f"FFprobe: {ffprobe_path}")
    print_info(f"Destination: {destination}")

    emitter = EventEmitter()
    supervisor = ConversionSupervisor(emitter, ffmpeg_path=ffmpeg_path, log_dir=LOG_DIR)
    pipeline = ConversionPipeline(supervisor, emitter, ffprobe_path=ffprobe_path)

    batch = pipeline.add_files(collect_video_files(args.files), destination)
    for path, message in batch.failures.items():
        print_warning(f"Skipped {path.name}: {message}")

    jobs = pipeline.queue.pending()
    if not jobs:
        print_error("No files to convert")
        return 1
    print_queue(jobs)

    try:
        with create_progress() as progress:
            view = ProgressView(pipeline, progress)
            for job in jobs:
                view.add_job(job)
            view.attach(emitter)
            pipeline.start()
            while not pipeline.wait(0.5):
                pass
    except KeyboardInterrupt:
        log.warning("Interrupted by user; the running encoder is not cancelled")
        return 130

    failed = pipeline.failed
    converted = len(pipeline.finished) - len(failed)
    if failed or batch.failures:
        print_error(
            f"{converted} converted, {len(failed)} failed, {len(batch.failures)} skipped"
        )
        return 1

    print_success(f"Converted {converted} file(s) to {destination}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
