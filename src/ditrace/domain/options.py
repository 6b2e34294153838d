"""Tracer configuration.

Rules:
    - All fields optional (defaults trace everything)
    - Immutable (frozen dataclass)
    - FAIL-FIRST on invalid values
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ListenerErrorPolicy(Enum):
    """What happens when a listener raises during dispatch.

    Values:
        PROPAGATE: Exception escapes into the traced call's control flow.
        ISOLATE: Exception is logged, dispatch continues with next listener.
    """

    PROPAGATE = "propagate"
    ISOLATE = "isolate"


@dataclass(frozen=True, slots=True)
class TracerOptions:
    """Configuration for Tracer.

    Attributes:
        filters: Raw filter expressions. Empty = trace everything.
        inspect_returned_awaitable: Wait for returned futures/coroutines before
            emitting "return". False = emit at once with the pending object.
        listener_errors: Policy for exceptions raised by listeners.
        trace_exceptions: Emit "return" with exception set when the traced
            call fails. False = failures emit nothing and a failed Future's
            exception is left unretrieved. True retrieves it to build the
            event, so asyncio no longer reports it as never retrieved.
    """

    filters: tuple[str, ...] = ()
    inspect_returned_awaitable: bool = True
    listener_errors: ListenerErrorPolicy = ListenerErrorPolicy.PROPAGATE
    trace_exceptions: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if isinstance(self.filters, str):
            raise TypeError("filters must be a sequence of strings, not a single string")
        # Accept any iterable of str, store as tuple
        object.__setattr__(self, "filters", tuple(self.filters))
        for raw in self.filters:
            if not isinstance(raw, str):
                raise TypeError(f"filter must be str, got {type(raw).__name__}")
        if not isinstance(self.listener_errors, ListenerErrorPolicy):
            raise TypeError(
                f"listener_errors must be ListenerErrorPolicy, got {type(self.listener_errors).__name__}"
            )
