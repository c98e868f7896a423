"""In-process event bus that fans events out to registered handlers."""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

_log = logging.getLogger(__name__)


@runtime_checkable
class Event(Protocol):
    """Anything with a name can be published."""

    @property
    def name(self) -> str:
        """The name handlers are registered under."""


@runtime_checkable
class EventHandler(Protocol):
    def handle(self, event: Event) -> None:
        """React to a published event."""


class EventBus:
    """Dispatches each published event to all handlers of its name, concurrently."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._lock = threading.Lock()

    def register_handler(self, event_name: str, handler: EventHandler) -> None:
        with self._lock:
            self._handlers.setdefault(event_name, []).append(handler)

    def publish(self, event: Event) -> None:
        """Run every handler of the event in its own thread and wait for all.

        Errors raised by handlers are logged and otherwise ignored.
        """
        with self._lock:
            handlers = list(self._handlers.get(event.name, ()))
        threads = [
            threading.Thread(target=self._dispatch, args=(handler, event), daemon=True)
            for handler in handlers
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    @staticmethod
    def _dispatch(handler: EventHandler, event: Event) -> None:
        try:
            handler.handle(event)
        except Exception:
            _log.warning("handler for event %r failed", event.name, exc_info=True)