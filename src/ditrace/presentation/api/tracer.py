"""Tracer: public entry point.

Example:
    tracer = Tracer(filters=["Repo*", "!Repo*:close"])
    tracer.on("call", lambda info: print("->", info.class_name, info.method_name))
    tracer.on("return", lambda info: print("<-", info.result, info.execution_time))
    tracer.apply(container)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING, Any, TypeVar

from ditrace.application.dispatcher import ListenerRegistry
from ditrace.application.instrumenter import ObjectInstrumenter
from ditrace.domain.options import ListenerErrorPolicy, TracerOptions
from ditrace.infrastructure.filters import FilterSet

if TYPE_CHECKING:
    from ditrace.domain.events import Handler, TracerEvent
    from ditrace.domain.ports.container import ActivationContainer, ActivationContext
    from ditrace.infrastructure.metadata import ClassMetadata

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Tracer:
    """Owns filters, options and listeners; hooks into containers.

    Attributes:
        options: Immutable configuration.
        class_filter: FilterSet matched against bare class names.
        method_filter: FilterSet matched against "Class:method".
    """

    def __init__(
        self,
        options: TracerOptions | None = None,
        *,
        filters: Iterable[str] | None = None,
        inspect_returned_awaitable: bool | None = None,
        listener_errors: ListenerErrorPolicy | None = None,
        trace_exceptions: bool | None = None,
    ) -> None:
        """Initialize tracer.

        Keyword arguments override the matching field of options.

        Raises:
            InvalidFilterError: Any filter expression is malformed.
        """
        self.options = _merge_options(
            options or TracerOptions(),
            filters=filters,
            inspect_returned_awaitable=inspect_returned_awaitable,
            listener_errors=listener_errors,
            trace_exceptions=trace_exceptions,
        )
        self.class_filter = FilterSet.for_classes(self.options.filters)
        self.method_filter = FilterSet.for_methods(self.options.filters)

        self._registry = ListenerRegistry(self.options.listener_errors)
        self._instrumenter = ObjectInstrumenter(self._registry, self.options)
        self._applied: list[ActivationContainer] = []

    def on(self, event: str | TracerEvent, handler: Handler) -> None:
        """Register handler for "call" or "return".

        Raises:
            InvalidTracerEventError: Unknown event name.
            InvalidHandlerError: handler is not callable.
        """
        self._registry.add(event, handler)

    def off(self, event: str | TracerEvent, handler: Handler) -> bool:
        """Unregister first registration of handler. Returns whether one was removed.

        Raises:
            InvalidTracerEventError: Unknown event name.
        """
        return self._registry.remove(event, handler)

    def listeners(self, event: str | TracerEvent) -> tuple[Handler, ...]:
        """Handlers registered for event, in invocation order."""
        return self._registry.handlers(event)

    def is_traced_class(self, class_name: str) -> bool:
        """Whether instances of class_name pass the class filter."""
        return self.class_filter.is_included(class_name)

    def instrument(
        self,
        instance: T,
        class_name: str | None = None,
        *,
        metadata: ClassMetadata | None = None,
    ) -> T:
        """Instrument one object if its class passes the class filter.

        Args:
            instance: Object to trace. Returned as is (same identity).
            class_name: Override for type(instance).__name__.
            metadata: Explicit method descriptor instead of introspection.
        """
        name = class_name or (metadata.class_name if metadata else type(instance).__name__)
        if not self.is_traced_class(name):
            logger.debug("skip %s (filtered)", name)
            return instance
        return self._instrumenter.instrument(instance, name, self.method_filter, metadata=metadata)

    def apply(self, container: ActivationContainer) -> None:
        """Instrument every instance the container activates from now on.

        The stage runs after the binding's own activation handlers and
        instruments their result. Applying twice to one container is a no-op.
        """
        if any(applied is container for applied in self._applied):
            logger.debug("tracer already applied to %r", container)
            return
        container.add_activation_stage(self._activation_stage)
        self._applied.append(container)
        logger.debug("tracer applied to %d binding(s)", sum(1 for _ in container.bindings()))

    def _activation_stage(self, context: ActivationContext, instance: Any) -> Any:
        del context  # Unused: class name comes from the activated instance
        return self.instrument(instance)


def _merge_options(base: TracerOptions, **overrides: Any) -> TracerOptions:
    """Replace fields of base with overrides that are not None."""
    given = {name: value for name, value in overrides.items() if value is not None}
    return replace(base, **given) if given else base
