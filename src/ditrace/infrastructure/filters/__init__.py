"""Infrastructure layer: name filters.

Usage:
    from ditrace.infrastructure.filters import FilterSet

    method_filter = FilterSet.for_methods(["Repo*", "!Repo:close"])
    method_filter.is_included("RepoUser:save")  # True
"""

from ditrace.infrastructure.filters.filter_set import FilterSet, validate_filter
from ditrace.infrastructure.filters.matcher import CompiledPattern, compile_pattern, matches

__all__ = [
    "CompiledPattern",
    "FilterSet",
    "compile_pattern",
    "matches",
    "validate_filter",
]
