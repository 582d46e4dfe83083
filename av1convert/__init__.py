"""
av1convert - Queued AV1 conversion of local video files

This package provides a sequential conversion pipeline that:
- Probes source files with ffprobe
- Queues them and converts one at a time with ffmpeg and SVT-AV1
- Tails the encoder log to report real-time progress
- Publishes progress, completion, error and next events to the front end

Output files keep the source name with an ``_av1.mp4`` suffix.
"""

__version__ = "0.1.0"
