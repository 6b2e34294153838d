"""ObjectInstrumenter: replace selected methods of a live instance with traced ones.

Identity preserved: the same object is returned, wrappers are stored as
instance attributes and shadow the class methods. The class itself is never
modified, so untraced instances of the same class are unaffected.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar
from weakref import WeakKeyDictionary

from ditrace.application.interceptor import intercept, is_traced
from ditrace.infrastructure.metadata import describe_class

if TYPE_CHECKING:
    from ditrace.application.dispatcher import ListenerRegistry
    from ditrace.domain.options import TracerOptions
    from ditrace.infrastructure.filters import FilterSet
    from ditrace.infrastructure.metadata import ClassMetadata

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ObjectInstrumenter:
    """Wraps methods selected by a method filter.

    Contracts:
        - Idempotent per registry: a method already traced for this
          registry is never wrapped again, other registries stack on top
        - Filtered-out methods are left untouched
        - Metadata introspected once per class
    """

    __slots__ = ("_metadata_cache", "_options", "_registry")

    def __init__(self, registry: ListenerRegistry, options: TracerOptions) -> None:
        self._registry = registry
        self._options = options
        # Weak keys: cached classes stay collectable
        self._metadata_cache: WeakKeyDictionary[type, dict[str, ClassMetadata]] = WeakKeyDictionary()

    def metadata_for(self, cls: type, class_name: str) -> ClassMetadata:
        """Introspected metadata for cls, cached."""
        by_name = self._metadata_cache.setdefault(cls, {})
        metadata = by_name.get(class_name)
        if metadata is None:
            metadata = describe_class(cls, class_name)
            by_name[class_name] = metadata
        return metadata

    def instrument(
        self,
        instance: T,
        class_name: str,
        method_filter: FilterSet,
        *,
        metadata: ClassMetadata | None = None,
    ) -> T:
        """Trace every method of instance that passes method_filter.

        Args:
            instance: Object to instrument in place.
            class_name: Name for "Class:method" candidates and events.
            method_filter: Method-level FilterSet.
            metadata: Explicit method descriptor. None = introspect type(instance).

        Returns:
            instance itself.
        """
        if metadata is None:
            metadata = self.metadata_for(type(instance), class_name)
        if not metadata.method_names:
            return instance

        if not hasattr(instance, "__dict__"):
            logger.warning("cannot instrument %s: instance has no __dict__", class_name)
            return instance

        own: dict[str, Any] = vars(instance)
        wrapped = 0
        for method_name in metadata.method_names:
            if is_traced(own.get(method_name), self._registry):
                continue
            if not method_filter.is_included(f"{class_name}:{method_name}"):
                logger.debug("skip %s:%s (filtered)", class_name, method_name)
                continue

            original = getattr(instance, method_name, None)
            if not callable(original):
                continue

            traced = intercept(
                original,
                class_name=class_name,
                method_name=method_name,
                parameter_names=metadata.parameter_names(method_name),
                registry=self._registry,
                options=self._options,
            )
            # Bypass custom/frozen __setattr__
            object.__setattr__(instance, method_name, traced)
            wrapped += 1

        logger.debug("instrumented %s: %d method(s) traced", class_name, wrapped)
        return instance
