"""In-process event source: the host publishes rename/modify/open, the engine subscribes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    RENAME = "rename"  # (entry, old_path)
    MODIFY = "modify"  # (entry,)
    OPEN = "open"  # (entry or None,)


EventHandler = Callable[..., Coroutine[Any, Any, Any]]


@dataclass(frozen=True)
class Subscription:
    kind: EventKind
    handler: EventHandler


class EventHub:
    """Delivers each event to its handlers in subscription order.

    ``emit`` awaits every handler before returning, so a handler always sees
    the state of the caller that raised the event (the engine relies on this
    to recognise its own renames). A failing handler is logged and skipped.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[EventHandler]] = {kind: [] for kind in EventKind}

    def on(self, kind: EventKind, handler: EventHandler) -> Subscription:
        self._handlers[kind].append(handler)
        return Subscription(kind, handler)

    def off(self, subscription: Subscription) -> None:
        handlers = self._handlers[subscription.kind]
        if subscription.handler in handlers:
            handlers.remove(subscription.handler)

    def handler_count(self, kind: EventKind) -> int:
        return len(self._handlers[kind])

    async def emit(self, kind: EventKind, *args: Any) -> None:
        for handler in list(self._handlers[kind]):
            try:
                await handler(*args)
            except Exception:
                logger.exception("Handler for %s event failed", kind.value)
