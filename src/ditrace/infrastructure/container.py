"""Reference dependency injection container with an activation pipeline.

Implements the ActivationContainer port so a Tracer can be applied to it.
Explicit over implicit: no auto-wiring, a target class is constructed with
no arguments and a factory receives the container.

Example Usage:
    container = Container()
    container.bind("Repo").to(Repo).in_singleton_scope()
    container.bind(Service).to_factory(lambda c: Service(c.get("Repo")))

    tracer.apply(container)
    service = container.get(Service)

Activation pipeline per binding:
    construct -> user on_activation handlers -> container-wide stages
Each stage receives the previous stage's result and runs once per activation.
Singletons are activated once and cached, so stages see them once.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from enum import Enum
from typing import Any, Self

from ditrace.domain.exceptions import (
    IncompleteBindingError,
    ServiceAlreadyBoundError,
    ServiceNotFoundError,
)
from ditrace.domain.ports.container import ActivationContext, ActivationStage

logger = logging.getLogger(__name__)

type Factory = Callable[[Container], Any]


class Scope(Enum):
    """How long an activated instance lives.

    Values:
        TRANSIENT: New instance every time it's requested
        SINGLETON: One instance for the container's lifetime
    """

    TRANSIENT = "transient"
    SINGLETON = "singleton"


class BindingBuilder:
    """Service binding plus fluent configuration.

    Satisfies the Binding port.
    """

    def __init__(self, key: Any, container: Container) -> None:
        self._key = key
        self._container = container
        self._factory: Factory | None = None
        self._scope = Scope.TRANSIENT
        self._handlers: list[ActivationStage] = []
        self._stages: list[ActivationStage] = []
        self._cached: Any = None
        self._has_cached = False
        self._lock = threading.Lock()

    @property
    def key(self) -> Any:
        """Service key of this binding."""
        return self._key

    @property
    def scope(self) -> Scope:
        """Lifetime of activated instances."""
        return self._scope

    def to(self, cls: type) -> Self:
        """Construct cls() on activation."""
        if not isinstance(cls, type):
            raise TypeError(f"to() expects a class, got {type(cls).__name__}")
        self._factory = lambda _container: cls()
        return self

    def to_factory(self, factory: Factory) -> Self:
        """Call factory(container) on activation."""
        if not callable(factory):
            raise TypeError(f"factory must be callable, got {type(factory).__name__}")
        self._factory = factory
        return self

    def to_constant(self, value: Any) -> Self:
        """Hand out value as is. Constants are activated once, like singletons."""
        self._factory = lambda _container: value
        self._scope = Scope.SINGLETON
        return self

    def in_singleton_scope(self) -> Self:
        self._scope = Scope.SINGLETON
        return self

    def in_transient_scope(self) -> Self:
        self._scope = Scope.TRANSIENT
        return self

    def on_activation(self, handler: ActivationStage) -> Self:
        """Add user handler. Runs before container-wide stages, once per activation."""
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {type(handler).__name__}")
        self._handlers.append(handler)
        return self

    def add_activation_stage(self, stage: ActivationStage) -> None:
        """Append container-wide stage (Binding port)."""
        self._stages.append(stage)

    def resolve(self) -> Any:
        """Return activated instance, cached for singletons."""
        if self._scope is Scope.TRANSIENT:
            return self._activate()

        with self._lock:
            if not self._has_cached:
                self._cached = self._activate()
                self._has_cached = True
            return self._cached

    def _activate(self) -> Any:
        if self._factory is None:
            raise IncompleteBindingError(self._key)

        instance = self._factory(self._container)
        context = ActivationContext(key=self._key, container=self._container)
        for stage in (*self._handlers, *self._stages):
            instance = stage(context, instance)
        logger.debug("activated %r as %s", self._key, type(instance).__name__)
        return instance


class Container:
    """Binding registry with transient and singleton scopes.

    Satisfies the ActivationContainer port.
    """

    def __init__(self) -> None:
        self._bindings: dict[Any, BindingBuilder] = {}
        self._stages: list[ActivationStage] = []

    def bind(self, key: Any) -> BindingBuilder:
        """Register a new binding for key.

        Raises:
            ServiceAlreadyBoundError: key already bound.
        """
        if key in self._bindings:
            raise ServiceAlreadyBoundError(key)
        binding = BindingBuilder(key, self)
        for stage in self._stages:
            binding.add_activation_stage(stage)
        self._bindings[key] = binding
        return binding

    def unbind(self, key: Any) -> None:
        """Remove binding for key.

        Raises:
            ServiceNotFoundError: key not bound.
        """
        if key not in self._bindings:
            raise ServiceNotFoundError(key)
        del self._bindings[key]

    def is_bound(self, key: Any) -> bool:
        return key in self._bindings

    def get(self, key: Any) -> Any:
        """Resolve key to an activated instance.

        Raises:
            ServiceNotFoundError: key not bound.
            IncompleteBindingError: binding has no target.
        """
        binding = self._bindings.get(key)
        if binding is None:
            raise ServiceNotFoundError(key)
        return binding.resolve()

    def bindings(self) -> Iterator[BindingBuilder]:
        """Enumerate bindings in registration order."""
        return iter(tuple(self._bindings.values()))

    def add_activation_stage(self, stage: ActivationStage) -> None:
        """Add stage to all current bindings and every binding created later."""
        self._stages.append(stage)
        for binding in self._bindings.values():
            binding.add_activation_stage(stage)
