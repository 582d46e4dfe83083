"""Shared fixtures for the av1convert test suite"""
from pathlib import Path

import pytest

from av1convert.events import EventEmitter, EventType
from av1convert.models import Job, MediaDescriptor

def make_media(path, frame_count=100, codec="h264"):
    return MediaDescriptor(
        path=Path(path),
        duration="00:00:04:00",
        frame_count=frame_count,
        codec=codec,
        size="1.00 MB",
    )

def make_job(path, destination, frame_count=100):
    return Job(media=make_media(path, frame_count), destination=Path(destination))

class EventRecorder:
    """Collects every emitted event in delivery order"""

    def __init__(self, emitter):
        self.events = []
        for event_type in EventType:
            emitter.on(event_type, self.events.append)

    def of_type(self, event_type):
        return [event for event in self.events if event.type is event_type]

    @property
    def types(self):
        return [event.type for event in self.events]

@pytest.fixture
def emitter():
    return EventEmitter()

@pytest.fixture
def recorder(emitter):
    return EventRecorder(emitter)
