"""Container port: the activation pipeline a tracer hooks into.

The tracer does not resolve dependencies. It only needs a way to add a
stage to every binding's activation pipeline. Any container satisfying
ActivationContainer can be traced.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class ActivationContext:
    """What is being activated.

    Attributes:
        key: Service key the binding was registered under.
        container: Container performing the activation.
    """

    key: Any
    container: Any


type ActivationStage = Callable[[ActivationContext, Any], Any]


class Binding(Protocol):
    """Contract for a single binding's activation pipeline.

    Stages run in registration order, each receiving the previous stage's
    result. Every stage runs exactly once per activation.
    """

    @property
    def key(self) -> Any:
        """Service key of this binding."""
        ...

    def add_activation_stage(self, stage: ActivationStage) -> None:
        """Append stage to the activation pipeline.

        Args:
            stage: Called with (context, instance), returns instance to hand on.
        """
        ...


class ActivationContainer(Protocol):
    """Contract for containers a Tracer can be applied to.

    Lifecycle:
    1. bindings() - enumerate bindings registered so far
    2. add_activation_stage() - register stage for current AND future bindings
    """

    def bindings(self) -> Iterable[Binding]:
        """Enumerate registered bindings."""
        ...

    def add_activation_stage(self, stage: ActivationStage) -> None:
        """Add stage to every current binding and to bindings created later."""
        ...
