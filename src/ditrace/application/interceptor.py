"""MethodInterceptor: transparent call/return tracing for one bound method.

Flow of a traced call:

    wrapper(*args, **kwargs)
        │
        ├─ emit CALL (CallInfo)            before the original runs
        ├─ start = perf_counter()
        ├─ result = original(*args, **kwargs)
        │
        ├─ plain value          → emit RETURN now, return value
        ├─ asyncio.Future/Task  → done-callback emits RETURN, return SAME future
        └─ coroutine            → return coroutine awaiting the original,
                                  emitting RETURN on completion

Transparency:
    - Caller receives the same value/object (coroutines: same awaited value)
    - Exceptions from the original propagate unchanged
    - Failures emit RETURN only with trace_exceptions=True
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import time
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ditrace.domain.events import UNSET, CallInfo, Parameter, ReturnInfo, TracerEvent

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping

    from ditrace.application.dispatcher import ListenerRegistry
    from ditrace.domain.options import TracerOptions

# Set on every wrapper to the registry it emits to. Wrappers of different
# registries may stack; each layer keeps the one below in __wrapped__.
TRACED_MARKER = "__ditrace_traced__"


def is_traced(function: object, registry: ListenerRegistry | None = None) -> bool:
    """Whether function is a MethodInterceptor wrapper.

    Args:
        function: Candidate callable.
        registry: Only count wrappers emitting to this registry. None = any.
    """
    while getattr(function, TRACED_MARKER, None) is not None:
        if registry is None or getattr(function, TRACED_MARKER) is registry:
            return True
        function = getattr(function, "__wrapped__", None)
    return False


def elapsed_ms(start: float) -> float:
    """Milliseconds since start (perf_counter), never negative."""
    return max(0.0, (time.perf_counter() - start) * 1000.0)


def _signature(function: Callable[..., Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(function)
    except (TypeError, ValueError):
        return None


class MethodInterceptor:
    """Wraps one method of one target instance.

    Attributes:
        class_name: Class name reported in events.
        method_name: Method name reported in events.
        original: The bound method being traced.
        parameter_names: Declared parameter names, declaration order.
    """

    __slots__ = (
        "_binder",
        "_options",
        "_registry",
        "class_name",
        "method_name",
        "original",
        "parameter_names",
    )

    def __init__(
        self,
        class_name: str,
        method_name: str,
        original: Callable[..., Any],
        *,
        parameter_names: tuple[str, ...],
        registry: ListenerRegistry,
        options: TracerOptions,
    ) -> None:
        if not callable(original):
            raise TypeError(f"original must be callable, got {type(original).__name__}")
        self.class_name = class_name
        self.method_name = method_name
        self.original = original
        self.parameter_names = parameter_names
        self._registry = registry
        self._options = options

        # Signature binding handles *args/**kwargs and keyword calls, but only
        # when it describes the same parameters the metadata declares.
        signature = _signature(original)
        if signature is not None and tuple(signature.parameters) == parameter_names:
            self._binder: inspect.Signature | None = signature
        else:
            self._binder = None

    def wrap(self) -> Callable[..., Any]:
        """Build replacement function with the original's calling convention."""

        @functools.wraps(self.original)
        def traced(*args: Any, **kwargs: Any) -> Any:
            return self.invoke(args, kwargs)

        if inspect.iscoroutinefunction(self.original):
            inspect.markcoroutinefunction(traced)
        setattr(traced, TRACED_MARKER, self._registry)
        return traced

    def invoke(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """Run one traced invocation."""
        if self._registry.has_listeners(TracerEvent.CALL):
            self._registry.emit(TracerEvent.CALL, self.call_info(args, kwargs))

        start = time.perf_counter()
        try:
            result = self.original(*args, **kwargs)
        except Exception as exc:
            self._emit_failure(exc, start)
            raise

        if not self._options.inspect_returned_awaitable:
            self._emit_return(result, start)
            return result
        if asyncio.isfuture(result):
            result.add_done_callback(functools.partial(self._on_future_done, start=start))
            return result
        if inspect.iscoroutine(result):
            return self._observe(result, start)

        self._emit_return(result, start)
        return result

    def call_info(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> CallInfo:
        """Build CallInfo for one invocation."""
        return CallInfo(
            class_name=self.class_name,
            method_name=self.method_name,
            parameters=self.pair_parameters(args, kwargs),
            arguments=tuple(args),
            keyword_arguments=MappingProxyType(dict(kwargs)),
        )

    def pair_parameters(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> tuple[Parameter, ...]:
        """Pair declared parameter names with passed values. Missing = UNSET."""
        if self._binder is not None:
            try:
                bound = self._binder.bind_partial(*args, **kwargs)
            except TypeError:
                # Caller passed arguments the original will reject; fall back
                # to positional pairing and let the original raise.
                pass
            else:
                return tuple(Parameter(name, bound.arguments.get(name, UNSET)) for name in self.parameter_names)

        return tuple(
            Parameter(name, args[index] if index < len(args) else kwargs.get(name, UNSET))
            for index, name in enumerate(self.parameter_names)
        )

    async def _observe(self, coroutine: Coroutine[Any, Any, Any], start: float) -> Any:
        try:
            value = await coroutine
        except (Exception, asyncio.CancelledError) as exc:
            self._emit_failure(exc, start)
            raise
        self._emit_return(value, start)
        return value

    def _on_future_done(self, future: asyncio.Future[Any], *, start: float) -> None:
        if future.cancelled():
            self._emit_failure(asyncio.CancelledError(), start)
            return
        if not self._options.trace_exceptions and hasattr(future, "_exception"):
            # exception()/result() mark a failure as retrieved and would silence
            # asyncio's "exception was never retrieved" report; peek instead
            if future._exception is None:
                self._emit_return(future.result(), start)
            return
        exc = future.exception()
        if exc is not None:
            self._emit_failure(exc, start)
            return
        self._emit_return(future.result(), start)

    def _emit_return(self, result: Any, start: float) -> None:
        execution_time = elapsed_ms(start)
        if self._registry.has_listeners(TracerEvent.RETURN):
            self._registry.emit(
                TracerEvent.RETURN,
                ReturnInfo(
                    class_name=self.class_name,
                    method_name=self.method_name,
                    result=result,
                    execution_time=execution_time,
                ),
            )

    def _emit_failure(self, exc: BaseException, start: float) -> None:
        if not self._options.trace_exceptions:
            return
        execution_time = elapsed_ms(start)
        if self._registry.has_listeners(TracerEvent.RETURN):
            self._registry.emit(
                TracerEvent.RETURN,
                ReturnInfo(
                    class_name=self.class_name,
                    method_name=self.method_name,
                    result=None,
                    execution_time=execution_time,
                    exception=exc,
                ),
            )


def intercept(
    original: Callable[..., Any],
    *,
    class_name: str,
    method_name: str,
    parameter_names: tuple[str, ...],
    registry: ListenerRegistry,
    options: TracerOptions,
) -> Callable[..., Any]:
    """Wrap bound method original with call/return tracing."""
    return MethodInterceptor(
        class_name,
        method_name,
        original,
        parameter_names=parameter_names,
        registry=registry,
        options=options,
    ).wrap()
