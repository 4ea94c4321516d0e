from __future__ import annotations

from collections import defaultdict
import logging
from typing import Callable, DefaultDict, List, Type


Handler = Callable[[object], None]

_logger = logging.getLogger(__name__)


class EventBus:
    """In-process publisher. Handlers run in (priority, registration) order."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[Type[object], List[tuple[int, int, Handler]]] = defaultdict(list)
        self._sequence = 0
        self._errors: List[Exception] = []

    def subscribe(self, event_type: Type[object], handler: Handler, *, priority: int = 100) -> None:
        rows = self._handlers[event_type]
        rows.append((int(priority), self._sequence, handler))
        self._sequence += 1
        rows.sort(key=lambda row: (row[0], row[1]))

    def unsubscribe(self, event_type: Type[object], handler: Handler) -> bool:
        rows = self._handlers.get(event_type, [])
        kept = [row for row in rows if row[2] != handler]
        removed = len(kept) != len(rows)
        self._handlers[event_type] = kept
        return removed

    def handler_count(self, event_type: Type[object]) -> int:
        return len(self._handlers.get(event_type, []))

    def publish(self, event: object) -> None:
        self._errors = []
        event_type = type(event)
        for priority, _, handler in list(self._handlers.get(event_type, [])):
            try:
                handler(event)
            except Exception as exc:
                self._errors.append(exc)
                _logger.exception(
                    "Event handler failed and was isolated",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": getattr(handler, "__qualname__", repr(handler)),
                        "priority": priority,
                    },
                )

    def last_publish_errors(self) -> List[Exception]:
        return list(self._errors)
