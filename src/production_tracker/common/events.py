"""Typed publish/subscribe channel between the data layer and its consumers.

Storage and services publish small frozen dataclasses; anything interested
(a view layer, a log forwarder, a test) subscribes by event type and gets an
unsubscribe callable back.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Type, TypeVar

from ..core.enums import NotificationLevel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionChanged:
    """A local collection was rewritten (by a save or by reconciliation)."""

    collection: str
    source: str = "local"


@dataclass(frozen=True)
class SyncCompleted:
    updated: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()


@dataclass(frozen=True)
class Notification:
    message: str
    level: NotificationLevel = NotificationLevel.SUCCESS
    context: dict = field(default_factory=dict)


E = TypeVar("E")


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(event_type, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def publish(self, event: object) -> None:
        with self._lock:
            handlers = list(self._handlers.get(type(event), ()))

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                # A broken subscriber must not undo a write that already happened.
                logger.exception("Event handler failed for %s", type(event).__name__)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()
