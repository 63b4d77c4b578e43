# matrix_system/events/event_bus.py
"""
Event bus for decoupled communication between the engine and its callers.
"""
from typing import Dict, List, Callable, Any
import logging

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple synchronous event bus.
    Every engine owns its own instance.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    def subscribe(self, eventName: str, handler: Callable):
        """Subscribe handler to event."""
        if eventName not in self._handlers:
            self._handlers[eventName] = []

        self._handlers[eventName].append(handler)
        logger.debug(f"Handler {handler.__name__} subscribed to {eventName}")

    def unsubscribe(self, eventName: str, handler: Callable):
        """Unsubscribe handler from event."""
        if eventName in self._handlers and handler in self._handlers[eventName]:
            self._handlers[eventName].remove(handler)
            logger.debug(f"Handler {handler.__name__} unsubscribed from {eventName}")

    def emit(self, eventName: str, data: Dict[str, Any]):
        """Emit event to all subscribers."""
        if eventName not in self._handlers:
            return

        logger.debug(f"Emitting event {eventName} with data: {data}")

        for handler in list(self._handlers[eventName]):
            try:
                handler(data)
            except Exception as e:
                logger.error(f"Error in handler {handler.__name__} for event {eventName}: {e}")

    def clear(self):
        """Clear all event handlers."""
        self._handlers.clear()


class MatrixEvents:
    """Standard matrix engine events."""

    MEMBER_PLACED = "member.placed"
    MEMBER_MIRRORED = "member.mirrored"
    MEMBER_UPDATED = "member.updated"
    MEMBER_STATUS_CHANGED = "member.status_changed"

    MATRIX_CYCLED = "matrix.cycled"
    STAGE_ADVANCED = "stage.advanced"
    STAGE_TERMINAL = "stage.terminal"
