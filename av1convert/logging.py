"""Centralized logging configuration for av1convert"""

import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import List

from rich.logging import RichHandler

from .config import APP_LOG_NAME, LOG_DIR, LOG_MAX_AGE
from .exceptions import StartupFatalError

logger = logging.getLogger(__name__)

def configure_logging(log_level: str = "INFO", log_dir: Path = LOG_DIR) -> Path:
    """
    Central logging configuration for all modules.

    Returns:
        Path of the application log, truncated for this session

    Raises:
        StartupFatalError: If the logs directory or app log cannot be created
    """
    log_dir = Path(log_dir)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StartupFatalError(f"Failed to create logs directory: {e}", module="logging") from e

    app_logger = logging.getLogger("av1convert")
    app_logger.setLevel(logging._nameToLevel.get(log_level.upper(), logging.INFO))

    # Remove existing handlers
    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)
        handler.close()

    # Rich console handler
    console_handler = RichHandler(show_path=False, rich_tracebacks=True)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    app_logger.addHandler(console_handler)

    log_file = log_dir / APP_LOG_NAME
    try:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    except OSError as e:
        raise StartupFatalError(f"Failed to create log file: {e}", module="logging") from e
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    app_logger.addHandler(file_handler)

    # Capture warnings
    logging.captureWarnings(True)

    app_logger.info("Started new logging session")
    app_logger.info("Log file: %s", log_file)
    return log_file

def cleanup_logs(log_dir: Path = LOG_DIR, max_age: timedelta = LOG_MAX_AGE) -> List[Path]:
    """Remove log files older than max_age, keeping the application log"""
    log_dir = Path(log_dir)
    try:
        entries = list(log_dir.iterdir())
    except OSError as e:
        logger.error("Error reading logs directory: %s", e)
        return []

    cutoff = time.time() - max_age.total_seconds()
    removed = []
    for path in entries:
        if path.name == APP_LOG_NAME or not path.is_file():
            continue
        try:
            if path.stat().st_mtime >= cutoff:
                continue
            path.unlink()
        except OSError as e:
            logger.error("Error removing old log file %s: %s", path, e)
            continue
        logger.info("Removed old log file: %s", path)
        removed.append(path)
    return removed
