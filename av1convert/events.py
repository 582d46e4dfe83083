"""Event system for av1convert.

This module carries lifecycle notifications from the conversion
pipeline to whatever presents them (the CLI, or any other front end).
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

class EventType(Enum):
    """Lifecycle event types."""
    PROGRESS = auto()
    COMPLETION = auto()
    ERROR = auto()
    NEXT = auto()

@dataclass
class Event:
    """Event data container.

    Attributes:
        type: Type of event
        timestamp: When the event occurred
        data: Event-specific data
        source: Component that generated the event
    """
    type: EventType
    timestamp: datetime
    data: Dict[str, Any]
    source: str

class EventEmitter:
    """Event sink shared by the pipeline components.

    Handlers are called synchronously on the emitting thread, in the
    order they were registered.
    """

    def __init__(self) -> None:
        """Initialize event emitter."""
        self._handlers: Dict[EventType, List[Callable[[Event], None]]] = {}
        self._error_handlers: List[Callable[[Exception], None]] = []
        self._lock = threading.Lock()

    def on(self, event_type: EventType, handler: Callable[[Event], None]) -> None:
        """Register an event handler.

        Args:
            event_type: Type of event to handle
            handler: Callback function for the event
        """
        with self._lock:
            handlers = self._handlers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)

    def off(self, event_type: EventType, handler: Callable[[Event], None]) -> None:
        """Remove an event handler.

        Args:
            event_type: Type of event to remove handler from
            handler: Handler to remove
        """
        with self._lock:
            handlers = self._handlers.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)
                if not handlers:
                    del self._handlers[event_type]

    def on_error(self, handler: Callable[[Exception], None]) -> None:
        """Register a handler for exceptions raised by event handlers."""
        with self._lock:
            if handler not in self._error_handlers:
                self._error_handlers.append(handler)

    def off_error(self, handler: Callable[[Exception], None]) -> None:
        """Remove an error handler."""
        with self._lock:
            if handler in self._error_handlers:
                self._error_handlers.remove(handler)

    def emit(self, event_type: EventType, data: Dict[str, Any], source: str) -> Event:
        """Emit an event to registered handlers.

        Args:
            event_type: Type of event to emit
            data: Event data
            source: Component emitting the event

        Returns:
            The delivered event
        """
        event = Event(
            type=event_type,
            timestamp=datetime.now(),
            data=data,
            source=source
        )
        with self._lock:
            handlers = list(self._handlers.get(event_type, ()))

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self._handle_error(e)
        return event

    def _handle_error(self, error: Exception) -> None:
        """Log a failing handler and forward the error to error handlers."""
        logger.error("Event handler failed: %s", error, exc_info=error)
        with self._lock:
            error_handlers = list(self._error_handlers)
        for handler in error_handlers:
            try:
                handler(error)
            except Exception:
                logger.exception("Error handler failed")
