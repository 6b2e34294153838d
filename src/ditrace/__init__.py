"""ditrace - transparent call/return tracing for objects built by a DI container."""

__version__ = "0.1.0"

from ditrace.application.reporters import ConsoleConfig, ConsoleReporter
from ditrace.domain.events import UNSET, CallInfo, Parameter, ReturnInfo, TracerEvent
from ditrace.domain.exceptions import (
    DITraceError,
    InvalidFilterError,
    InvalidHandlerError,
    InvalidTracerEventError,
)
from ditrace.domain.options import ListenerErrorPolicy, TracerOptions
from ditrace.infrastructure.container import Container, Scope
from ditrace.presentation.api.tracer import Tracer

__all__ = [
    "UNSET",
    "CallInfo",
    "ConsoleConfig",
    "ConsoleReporter",
    "Container",
    "DITraceError",
    "InvalidFilterError",
    "InvalidHandlerError",
    "InvalidTracerEventError",
    "ListenerErrorPolicy",
    "Parameter",
    "ReturnInfo",
    "Scope",
    "Tracer",
    "TracerEvent",
    "TracerOptions",
    "__version__",
]
