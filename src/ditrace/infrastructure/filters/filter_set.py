"""FilterSet: include/exclude rules over class and method names.

Expression syntax:
    Test            include class Test (all its methods)
    Test*           include classes starting with Test
    Test:save       include method save of class Test
    *:save          include method save of any class
    !Test           exclude class Test
    !Test:save      exclude only method save of class Test

Precedence: exclude beats include; no include rules = everything included.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from ditrace.domain.exceptions import InvalidFilterError
from ditrace.infrastructure.filters.matcher import NEGATION, WILDCARD, matches

SEPARATOR = ":"

_ALLOWED = re.compile(r"[A-Za-z0-9_:*!.]+")


def validate_filter(raw: str) -> None:
    """Validate one raw filter expression. FAIL-FIRST.

    Raises:
        InvalidFilterError: Disallowed character or malformed structure.
    """
    if not isinstance(raw, str):
        raise InvalidFilterError(repr(raw), f"must be str, got {type(raw).__name__}")
    if not raw:
        raise InvalidFilterError(raw, "must not be empty")
    if _ALLOWED.fullmatch(raw) is None:
        raise InvalidFilterError(raw, "allowed characters are letters, digits, '_', ':', '*', '!', '.'")

    body = raw.removeprefix(NEGATION)
    if not body:
        raise InvalidFilterError(raw, f"pattern after {NEGATION!r} must not be empty")
    if NEGATION in body:
        raise InvalidFilterError(raw, f"{NEGATION!r} is only allowed as first character")
    if body.count(SEPARATOR) > 1:
        raise InvalidFilterError(raw, f"at most one {SEPARATOR!r} allowed")
    if SEPARATOR in body and not all(body.split(SEPARATOR)):
        raise InvalidFilterError(raw, f"class and method around {SEPARATOR!r} must not be empty")


def is_exclude(raw: str) -> bool:
    """Whether raw expression is an exclusion."""
    return raw.startswith(NEGATION)


def to_method_filter(raw: str) -> str:
    """Rewrite class-only expression to cover all its methods: Test -> Test:*."""
    if SEPARATOR in raw:
        return raw
    return f"{raw}{SEPARATOR}{WILDCARD}"


def to_class_filter(raw: str) -> str | None:
    """Class-level view of a raw expression.

    Returns:
        Class-only expressions unchanged. Class part of "Class:method" includes.
        Class part of "!Class:*" excludes. None for method-specific excludes,
        which must not exclude the whole class.
    """
    if SEPARATOR not in raw:
        return raw
    class_part, method_part = raw.split(SEPARATOR)
    if not is_exclude(raw):
        return class_part
    if method_part == WILDCARD:
        return class_part
    return None


@dataclass(frozen=True, slots=True)
class FilterSet:
    """Immutable include/exclude rule set.

    Invariant: every raw filter lands in exactly one list, by leading '!'.
    Exclude entries keep their '!' as written.

    Attributes:
        include_filters: Include patterns, in input order.
        exclude_filters: Exclude patterns ('!' prefixed), in input order.
    """

    include_filters: tuple[str, ...] = ()
    exclude_filters: tuple[str, ...] = ()

    @classmethod
    def from_filters(cls, filters: Iterable[str]) -> FilterSet:
        """Build FilterSet from raw expressions, validating each.

        Raises:
            InvalidFilterError: Any expression is malformed.
        """
        raw_filters = tuple(filters)
        for raw in raw_filters:
            validate_filter(raw)
        return cls(
            include_filters=tuple(f for f in raw_filters if not is_exclude(f)),
            exclude_filters=tuple(f for f in raw_filters if is_exclude(f)),
        )

    @classmethod
    def for_classes(cls, filters: Iterable[str]) -> FilterSet:
        """Class-level view: matched against bare class names."""
        raw_filters = tuple(filters)
        for raw in raw_filters:
            validate_filter(raw)
        derived = (to_class_filter(f) for f in raw_filters)
        return cls.from_filters(dict.fromkeys(f for f in derived if f is not None))

    @classmethod
    def for_methods(cls, filters: Iterable[str]) -> FilterSet:
        """Method-level view: matched against "Class:method" candidates."""
        raw_filters = tuple(filters)
        for raw in raw_filters:
            validate_filter(raw)
        return cls.from_filters(to_method_filter(f) for f in raw_filters)

    def is_included(self, candidate: str) -> bool:
        """Check candidate against rules. Exclusion takes precedence.

        Args:
            candidate: "ClassName" or "ClassName:method_name"

        Returns:
            False if any exclude matches, else True if any include matches,
            else True when there are no include rules.
        """
        if self.exclude_filters and matches(candidate, self.exclude_filters):
            return False
        if self.include_filters:
            return matches(candidate, self.include_filters)
        return True

    @property
    def is_empty(self) -> bool:
        """No rules: traces everything."""
        return not self.include_filters and not self.exclude_filters
