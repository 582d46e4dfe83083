"""Configuration settings for the av1convert conversion pipeline

This module centralizes all configuration settings including:
- Log and preference file locations
- Fixed SVT-AV1 encoding policy
- Progress monitoring intervals
- Executable search locations

User-configurable paths can be overridden via environment variables;
everything else is an internal constant used throughout the pipeline.
"""

import os
from datetime import timedelta
from pathlib import Path

# LOG_DIR: user definable with default of "$HOME/av1convert_logs"
LOG_DIR = Path(os.environ.get("AV1CONVERT_LOG_DIR", str(Path.home() / "av1convert_logs")))

# Persisted preferences (last used destination folder)
CONFIG_PATH = Path(
    os.environ.get("AV1CONVERT_CONFIG", str(Path.home() / ".av1convert" / "config.json"))
)

# Main application log, truncated on every start
APP_LOG_NAME = "app.log"

# Encoding settings (fixed policy, not user configurable)
VIDEO_CODEC = "libsvtav1"
CRF = 30
PRESET = 6
SVT_PARAMS = "tune=0"
AUDIO_CODEC = "copy"
OUTPUT_SUFFIX = "_av1.mp4"
ENCODER_LOG_SUFFIX = "_ffmpeg.log"

# Output file naming
MAX_NAME_LENGTH = 200
INVALID_NAME_CHARS = '/\\:*?"<>|'

# Progress monitoring
POLL_INTERVAL = 0.5  # Seconds between log polls
TAIL_WINDOW = 1024  # Bytes read from the end of the encoder log
SETTLE_DELAY = 1.0  # Pause after the final sample before reporting completion

# Encoder logs older than this are removed at startup
LOG_MAX_AGE = timedelta(hours=24)

# Accepted source containers
VIDEO_EXTENSIONS = (".mp4", ".avi", ".mov", ".mkv")

# Checked in order after the script and application directories, before PATH
TOOL_SEARCH_DIRS = (
    Path("/usr/local/bin"),
    Path("/opt/homebrew/bin"),
)

# Logging configuration
LOG_LEVEL = os.environ.get("AV1CONVERT_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
