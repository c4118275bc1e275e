"""
Error Sinks

Side channel for soft failures (invalid expressions, failed fetches).
Chart building never raises for these; it hands a message to a sink and
carries on.

Sinks:
- LoggingErrorSink: writes each message to the log
- SnackbarErrorSink: keeps a short newest-first list for the UI, dropping
  messages that are already on screen
"""

from collections import deque
from typing import Protocol, runtime_checkable

from loguru import logger


@runtime_checkable
class ErrorSink(Protocol):
    """Single-method notification interface."""

    def notify(self, message: str) -> None:
        ...


class LoggingErrorSink:
    """Error sink that logs every message at WARNING."""

    def notify(self, message: str) -> None:
        logger.warning(message)


class SnackbarErrorSink:
    """
    Bounded, duplicate-free message list for display.

    A chart over thousands of contracts with a broken expression produces
    the same message thousands of times; only the first one is kept.

    Attributes:
        capacity: Maximum number of messages kept (oldest dropped first)
        suppressed: Number of duplicate messages dropped since last drain
    """

    def __init__(self, capacity: int = 10):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1: {capacity}")

        self.capacity = capacity
        self.suppressed = 0
        self._messages: deque[str] = deque(maxlen=capacity)

    def notify(self, message: str) -> None:
        if message in self._messages:
            self.suppressed += 1
            return

        logger.warning(message)
        self._messages.appendleft(message)

    @property
    def messages(self) -> list[str]:
        """Messages currently shown, newest first."""
        return list(self._messages)

    def drain(self) -> list[str]:
        """Return all messages (newest first) and reset the sink."""
        messages = list(self._messages)
        self._messages.clear()
        self.suppressed = 0
        return messages
