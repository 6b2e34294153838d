"""Domain exceptions: all public errors of ditrace.

Hexagonal architecture: all exceptions visible to users defined in domain.
Infrastructure/Application use these, not define their own public exceptions.
"""

from __future__ import annotations


class DITraceError(Exception):
    """Base for all ditrace error exceptions.

    Allows: except DITraceError to catch all library errors.
    """


class InvalidFilterError(DITraceError, ValueError):
    """Filter expression is malformed.

    Raised eagerly at FilterSet construction, before any tracing begins.
    Inherits ValueError for semantic correctness.

    Attributes:
        filter: The offending raw filter string.
        reason: Why the filter is invalid.
    """

    def __init__(self, filter: str, reason: str) -> None:  # noqa: A002
        """Initialize with raw filter and reason."""
        self.filter = filter
        self.reason = reason
        super().__init__(f"invalid filter {filter!r}: {reason}")


class InvalidTracerEventError(DITraceError, ValueError):
    """Event name is not one of the tracer events ("call", "return").

    Attributes:
        event: The rejected event name.
    """

    def __init__(self, event: object) -> None:
        """Initialize with rejected event name."""
        self.event = event
        super().__init__(f"invalid tracer event {event!r}, expected 'call' or 'return'")


class InvalidHandlerError(DITraceError, TypeError):
    """Handler must be callable.

    Raised when a listener is registered with a non-callable.
    Inherits TypeError for semantic correctness.

    Attributes:
        got: Actual type received.
    """

    def __init__(self, got: type) -> None:
        """Initialize with actual type."""
        self.got = got
        super().__init__(f"handler must be callable, got {got.__name__}")


class ServiceNotFoundError(DITraceError, KeyError):
    """No binding registered for the requested service key.

    Attributes:
        key: The unresolved service key.
    """

    def __init__(self, key: object) -> None:
        """Initialize with service key."""
        self.key = key
        super().__init__(f"service not bound: {_key_name(key)}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class ServiceAlreadyBoundError(DITraceError, ValueError):
    """A binding for the service key already exists.

    Attributes:
        key: The duplicated service key.
    """

    def __init__(self, key: object) -> None:
        """Initialize with service key."""
        self.key = key
        super().__init__(f"service already bound: {_key_name(key)}")


class IncompleteBindingError(DITraceError, RuntimeError):
    """Binding was activated before a target was configured with to*()."""

    def __init__(self, key: object) -> None:
        """Initialize with service key."""
        self.key = key
        super().__init__(f"binding for {_key_name(key)} has no target, call to() first")


def _key_name(key: object) -> str:
    """Readable name for a service key (class or string token)."""
    return getattr(key, "__name__", None) or str(key)
