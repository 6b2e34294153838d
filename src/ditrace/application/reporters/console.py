"""Console reporter: live CallInfo/ReturnInfo lines rendered with rich.

Usage:
    reporter = ConsoleReporter()
    reporter.attach(tracer)

Output:
    → UserRepo.find(user_id=7)
    ← UserRepo.find = User(id=7) (0.42 ms)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from ditrace.domain.events import UNSET, TracerEvent

if TYPE_CHECKING:
    from ditrace.domain.events import CallInfo, Parameter, ReturnInfo
    from ditrace.presentation.api.tracer import Tracer


@dataclass(frozen=True, slots=True)
class ConsoleConfig:
    """Configuration for console reporter.

    All fields have defaults (convenience).
    Immutable (frozen dataclass).

    Attributes:
        show_arguments: Render parameter values on call lines.
        show_result: Render results on return lines.
        max_value_length: Truncate rendered values longer than this. None = never.
    """

    show_arguments: bool = True
    show_result: bool = True
    max_value_length: int | None = 80

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.max_value_length is not None and self.max_value_length < 4:
            raise ValueError(f"max_value_length must be >= 4 or None, got {self.max_value_length}")


class ConsoleReporter:
    """Prints one line per event. Holds no event history."""

    def __init__(self, config: ConsoleConfig | None = None, console: Console | None = None) -> None:
        """Initialize reporter.

        Args:
            config: Reporter configuration. Uses defaults if None.
            console: Rich console to print to. New stderr console if None.
        """
        self._config = config or ConsoleConfig()
        self._console = console or Console(stderr=True)

    def attach(self, tracer: Tracer) -> None:
        """Register on_call/on_return on tracer."""
        tracer.on(TracerEvent.CALL, self.on_call)
        tracer.on(TracerEvent.RETURN, self.on_return)

    def on_call(self, info: CallInfo) -> None:
        self._console.print(f"[cyan]→[/cyan] {escape(self.format_call(info))}", highlight=False)

    def on_return(self, info: ReturnInfo) -> None:
        colour = "red" if info.exception is not None else "green"
        self._console.print(f"[{colour}]←[/{colour}] {escape(self.format_return(info))}", highlight=False)

    def format_call(self, info: CallInfo) -> str:
        """Plain text for call line: Class.method(name=value, ...)."""
        if not self._config.show_arguments:
            return f"{info.class_name}.{info.method_name}(...)"
        rendered = ", ".join(self._format_parameter(p) for p in info.parameters if p.value is not UNSET)
        return f"{info.class_name}.{info.method_name}({rendered})"

    def format_return(self, info: ReturnInfo) -> str:
        """Plain text for return line: Class.method = result (N ms)."""
        target = f"{info.class_name}.{info.method_name}"
        timing = f"({info.execution_time:.2f} ms)"
        if info.exception is not None:
            return f"{target} raised {type(info.exception).__name__}: {info.exception} {timing}"
        if not self._config.show_result:
            return f"{target} {timing}"
        return f"{target} = {self._format_value(info.result)} {timing}"

    def _format_parameter(self, parameter: Parameter) -> str:
        return f"{parameter.name}={self._format_value(parameter.value)}"

    def _format_value(self, value: object) -> str:
        text = repr(value)
        limit = self._config.max_value_length
        if limit is not None and len(text) > limit:
            return text[: limit - 3] + "..."
        return text
