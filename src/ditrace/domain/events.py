"""Domain layer: immutable value objects for trace events.

One CallInfo and at most one ReturnInfo per traced invocation.
All objects frozen: listeners receive their own copy, never shared state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Final, final


class TracerEvent(Enum):
    """Events a tracer emits."""

    CALL = "call"
    RETURN = "return"


@final
class _Unset:
    """Sentinel type for a declared parameter with no passed argument."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True, slots=True)
class Parameter:
    """Declared parameter name paired with the passed value.

    value is UNSET when the caller did not pass the argument.
    """

    name: str
    value: Any


@dataclass(frozen=True, slots=True)
class CallInfo:
    """CALL event: traced method entry.

    Attributes:
        class_name: Name of the traced class.
        method_name: Name of the traced method.
        parameters: Declared parameters in declaration order, paired with values.
        arguments: Raw positional arguments as passed.
        keyword_arguments: Raw keyword arguments as passed (read-only).
    """

    class_name: str
    method_name: str
    parameters: tuple[Parameter, ...]
    arguments: tuple[Any, ...]
    keyword_arguments: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class ReturnInfo:
    """RETURN event: traced method exit.

    Attributes:
        class_name: Name of the traced class.
        method_name: Name of the traced method.
        result: Returned value, resolved value for awaitables.
        execution_time: Elapsed milliseconds, monotonic clock.
        exception: Failure of the traced call, only when failures are traced.
    """

    class_name: str
    method_name: str
    result: Any
    execution_time: float
    exception: BaseException | None = None

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.execution_time < 0:
            raise ValueError(f"execution_time must be >= 0, got {self.execution_time}")


type TraceInfo = CallInfo | ReturnInfo

type CallHandler = Callable[[CallInfo], object]
type ReturnHandler = Callable[[ReturnInfo], object]
type Handler = CallHandler | ReturnHandler
