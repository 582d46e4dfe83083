"""Utility functions for the av1convert pipeline"""

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .config import INVALID_NAME_CHARS, MAX_NAME_LENGTH, TOOL_SEARCH_DIRS, VIDEO_EXTENSIONS
from .exceptions import StartupFatalError

logger = logging.getLogger(__name__)

_NAME_TABLE = str.maketrans({ch: "_" for ch in INVALID_NAME_CHARS})

def sanitize_file_name(name: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Replace characters that are invalid in file names and cap the length"""
    return name.translate(_NAME_TABLE)[:max_length]

def format_size_mb(size_bytes: Union[int, float]) -> str:
    """Format a byte count as megabytes with two decimals"""
    return f"{size_bytes / 1024 / 1024:.2f} MB"

def get_app_dir() -> Path:
    """
    Directory the application runs from.

    Inside a macOS bundle (``Foo.app/Contents/MacOS``) this is the folder
    holding the bundle's ``Contents`` directory.
    """
    app_dir = Path(sys.argv[0]).resolve().parent
    if app_dir.name == "MacOS":
        app_dir = app_dir.parent.parent
    return app_dir

def _executable_name(name: str) -> str:
    return f"{name}.exe" if os.name == "nt" else name

def find_executable(name: str, app_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Locate an external tool.

    Checks the script directory, the application directory and the common
    install locations in order, then falls back to a PATH lookup.

    Args:
        name: Executable name without extension (e.g. "ffmpeg")
        app_dir: Application directory, defaults to get_app_dir()

    Returns:
        Path to the executable, or None if it was not found anywhere
    """
    app_dir = app_dir or get_app_dir()
    exe_name = _executable_name(name)
    candidates = [
        Path(sys.argv[0]).parent / exe_name,
        app_dir / exe_name,
    ]
    candidates.extend(directory / exe_name for directory in TOOL_SEARCH_DIRS)

    for candidate in candidates:
        logger.debug("Checking for %s at: %s", name, candidate)
        if candidate.is_file():
            logger.info("Found %s at: %s", name, candidate)
            return candidate

    found = shutil.which(name)
    if found:
        logger.info("Found %s in PATH: %s", name, found)
        return Path(found)

    logger.error("%s not found in any expected location or system PATH", name)
    return None

def locate_tools(app_dir: Optional[Path] = None) -> Tuple[Path, Path]:
    """
    Find ffmpeg and ffprobe.

    Returns:
        Tuple of (ffmpeg path, ffprobe path)

    Raises:
        StartupFatalError: If either tool is missing
    """
    ffmpeg_path = find_executable("ffmpeg", app_dir)
    ffprobe_path = find_executable("ffprobe", app_dir)
    if ffmpeg_path is None or ffprobe_path is None:
        raise StartupFatalError(
            "FFmpeg or FFprobe not found. Please ensure both are installed and "
            "available next to the application or in the system PATH.",
            module="utils"
        )
    logger.info("Using FFmpeg: %s", ffmpeg_path)
    logger.info("Using FFprobe: %s", ffprobe_path)
    return ffmpeg_path, ffprobe_path

def is_video_file(path: Path) -> bool:
    return Path(path).suffix.lower() in VIDEO_EXTENSIONS

def collect_video_files(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """
    Expand the given paths into source files.

    Directories contribute their video files (sorted, non-recursive);
    files are kept as given, whatever their extension, and left for the
    prober to judge. Missing paths are kept too so they are reported.
    """
    files = []
    for path in map(Path, paths):
        if path.is_dir():
            found = sorted(p for p in path.iterdir() if p.is_file() and is_video_file(p))
            if not found:
                logger.warning("No video files found in %s", path)
            files.extend(found)
        else:
            if path.is_file() and not is_video_file(path):
                logger.warning("%s does not look like a video file", path)
            files.append(path)
    return files
