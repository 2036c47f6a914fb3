from __future__ import annotations

import logging
from collections import defaultdict
from threading import Lock
from typing import Any, Callable

Handler = Callable[[dict[str, Any]], None]

logger = logging.getLogger(__name__)


class EventBus:
    """In-process synchronous dispatch. A failing handler is logged and skipped."""

    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[Handler]] = defaultdict(list)
        self._lock = Lock()

    def subscribe(self, event_name: str, handler: Handler) -> None:
        with self._lock:
            if handler not in self._handlers[event_name]:
                self._handlers[event_name].append(handler)

    def unsubscribe(self, event_name: str, handler: Handler) -> None:
        with self._lock:
            if handler in self._handlers.get(event_name, []):
                self._handlers[event_name].remove(handler)

    def emit(self, event_name: str, payload: dict[str, Any]) -> int:
        with self._lock:
            handlers = tuple(self._handlers.get(event_name, ()))
        if not handlers:
            logger.debug("no handlers for %s", event_name)
            return 0
        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("handler %s failed for %s", getattr(handler, "__name__", handler), event_name)
            else:
                delivered += 1
        return delivered


event_bus = EventBus()
