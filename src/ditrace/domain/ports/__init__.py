"""Domain ports: contracts for external collaborators."""

from ditrace.domain.ports.container import (
    ActivationContainer,
    ActivationContext,
    ActivationStage,
    Binding,
)

__all__ = [
    "ActivationContainer",
    "ActivationContext",
    "ActivationStage",
    "Binding",
]
