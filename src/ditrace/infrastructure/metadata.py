"""Class metadata: which methods a class has and what they are called with.

Two sources, same result type:
    describe_class(cls)                   introspection via inspect
    ClassMetadata.from_descriptor(...)    explicit method descriptor

Only plain functions (sync or async) count as methods. Dunder names,
staticmethods, classmethods, properties and other descriptors are skipped.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def is_dunder(name: str) -> bool:
    """Dunder names cover constructors and protocol hooks."""
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


@dataclass(frozen=True, slots=True)
class ClassMetadata:
    """Method names and declared parameter names of one class.

    Attributes:
        class_name: Name used in "Class:method" candidates and events.
        method_names: Methods in discovery order (most derived class first).
        parameters: Method name -> declared parameter names, excluding self.
    """

    class_name: str
    method_names: tuple[str, ...]
    parameters: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.class_name:
            raise ValueError("class_name must not be empty")
        unknown = set(self.parameters) - set(self.method_names)
        if unknown:
            raise ValueError(f"parameters given for unknown methods: {sorted(unknown)}")

    def parameter_names(self, method_name: str) -> tuple[str, ...]:
        """Declared parameter names of method. Empty if unknown."""
        return self.parameters.get(method_name, ())

    @classmethod
    def from_descriptor(
        cls,
        class_name: str,
        descriptor: Mapping[str, Iterable[str]],
    ) -> ClassMetadata:
        """Build metadata from explicit mapping {method: [param, ...]}.

        Mapping order is method order.
        """
        params = {name: tuple(names) for name, names in descriptor.items()}
        return cls(
            class_name=class_name,
            method_names=tuple(params),
            parameters=MappingProxyType(params),
        )


def _parameter_names(function: Any) -> tuple[str, ...]:
    """Declared parameter names without the leading self."""
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return ()
    names = tuple(signature.parameters)
    return names[1:]


def describe_class(cls: type, class_name: str | None = None) -> ClassMetadata:
    """Introspect class methods and their parameter names.

    Walks the MRO (object excluded). A name defined in a subclass shadows
    the same name in its bases, including when the subclass defines it as
    a non-method.

    Args:
        cls: Class to describe.
        class_name: Override for cls.__name__.
    """
    if not inspect.isclass(cls):
        raise TypeError(f"cls must be a class, got {type(cls).__name__}")

    seen: set[str] = set()
    params: dict[str, tuple[str, ...]] = {}
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if is_dunder(name) or not inspect.isfunction(member):
                continue
            params[name] = _parameter_names(member)

    return ClassMetadata(
        class_name=class_name or cls.__name__,
        method_names=tuple(params),
        parameters=MappingProxyType(params),
    )
