"""Listener registry and synchronous event dispatch.

Contract:
    - Handlers run in registration order, synchronously
    - A handler registered N times runs N times per event
    - PROPAGATE: first handler exception escapes, later handlers do not run
    - ISOLATE: handler exception logged, remaining handlers still run
    - A handler returning a coroutine is not awaited (fire-and-forget)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any

from ditrace.domain.events import TracerEvent
from ditrace.domain.exceptions import InvalidHandlerError, InvalidTracerEventError
from ditrace.domain.options import ListenerErrorPolicy

if TYPE_CHECKING:
    from ditrace.domain.events import Handler, TraceInfo

logger = logging.getLogger(__name__)

# Strong refs to listener tasks until they finish
_background: set[asyncio.Future[Any]] = set()


def parse_event(event: str | TracerEvent) -> TracerEvent:
    """Normalize event name to TracerEvent.

    Raises:
        InvalidTracerEventError: Not "call" or "return".
    """
    if isinstance(event, TracerEvent):
        return event
    if isinstance(event, str):
        try:
            return TracerEvent(event)
        except ValueError:
            pass
    raise InvalidTracerEventError(event)


class ListenerRegistry:
    """Event name -> ordered handlers.

    Attributes:
        policy: What to do when a handler raises.
    """

    __slots__ = ("_listeners", "policy")

    def __init__(self, policy: ListenerErrorPolicy = ListenerErrorPolicy.PROPAGATE) -> None:
        self.policy = policy
        self._listeners: dict[TracerEvent, list[Handler]] = {event: [] for event in TracerEvent}

    def add(self, event: str | TracerEvent, handler: Handler) -> None:
        """Register handler for event.

        Raises:
            InvalidTracerEventError: Unknown event.
            InvalidHandlerError: handler is not callable.
        """
        parsed = parse_event(event)
        if not callable(handler):
            raise InvalidHandlerError(type(handler))
        self._listeners[parsed].append(handler)

    def remove(self, event: str | TracerEvent, handler: Handler) -> bool:
        """Remove first registration of handler. Returns whether one was removed."""
        listeners = self._listeners[parse_event(event)]
        try:
            listeners.remove(handler)
        except ValueError:
            return False
        return True

    def handlers(self, event: str | TracerEvent) -> tuple[Handler, ...]:
        """Snapshot of handlers for event."""
        return tuple(self._listeners[parse_event(event)])

    def has_listeners(self, event: TracerEvent) -> bool:
        return bool(self._listeners[event])

    def emit(self, event: TracerEvent, info: TraceInfo) -> None:
        """Dispatch info to every handler of event, in registration order."""
        # Snapshot: handlers registered during dispatch see the next event
        for handler in tuple(self._listeners[event]):
            if self.policy is ListenerErrorPolicy.PROPAGATE:
                outcome = handler(info)
            else:
                try:
                    outcome = handler(info)
                except Exception:
                    logger.exception("%s listener %r raised", event.value, handler)
                    continue
            if inspect.iscoroutine(outcome):
                _schedule(outcome, event)


def _schedule(coroutine: Any, event: TracerEvent) -> None:
    """Run coroutine returned by a listener in the background."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        coroutine.close()
        logger.warning("%s listener returned a coroutine outside an event loop, dropped", event.value)
        return
    task = asyncio.ensure_future(coroutine)
    _background.add(task)
    task.add_done_callback(_background.discard)
