"""Tests for FilterSet.

Tests:
- validation: allowed characters and structure, FAIL-FIRST
- classification: include vs exclude by leading '!'
- derived views: class filter and method filter
- is_included: exclusion precedence, default include
"""

import pytest

from ditrace.domain.exceptions import InvalidFilterError
from ditrace.infrastructure.filters.filter_set import FilterSet, validate_filter


class TestValidateFilter:
    """Tests for validate_filter."""

    @pytest.mark.parametrize(
        "raw",
        ["Test", "Test*", "*", "!Test", "Test:run", "*:save", "!Test:*", "pkg.Test", "Test_2:do_it"],
    )
    def test_valid_filters_accepted(self, raw: str) -> None:
        """Filters using only allowed characters pass."""
        validate_filter(raw)

    @pytest.mark.parametrize("raw", ['invalid!"#!filter', "Test Object", "Test-Object", "Test?", "Tést", "Test/run"])
    def test_disallowed_characters_raise(self, raw: str) -> None:
        """Any character outside the allowed set raises."""
        with pytest.raises(InvalidFilterError):
            validate_filter(raw)

    @pytest.mark.parametrize(
        ("raw", "reason"),
        [
            ("", "empty"),
            ("!", "after"),
            ("Te!st", "first character"),
            ("!!Test", "first character"),
            ("A:b:c", "at most one"),
            ("Test:", "must not be empty"),
            (":run", "must not be empty"),
        ],
    )
    def test_malformed_structure_raises(self, raw: str, reason: str) -> None:
        """Structural errors raise with a reason."""
        with pytest.raises(InvalidFilterError, match=reason):
            validate_filter(raw)

    def test_non_string_raises(self) -> None:
        """Non-str filter raises InvalidFilterError."""
        with pytest.raises(InvalidFilterError, match="must be str"):
            validate_filter(42)  # type: ignore[arg-type]

    def test_error_carries_filter_and_reason(self) -> None:
        """InvalidFilterError exposes the raw filter and the reason."""
        with pytest.raises(InvalidFilterError) as exc_info:
            validate_filter("A:b:c")

        assert exc_info.value.filter == "A:b:c"
        assert "one" in exc_info.value.reason


class TestFromFilters:
    """Tests for FilterSet.from_filters classification."""

    def test_include_and_exclude_split(self) -> None:
        """Each filter lands in exactly one list, order kept."""
        filter_set = FilterSet.from_filters(["A", "!B", "C", "!D"])

        assert filter_set.include_filters == ("A", "C")
        assert filter_set.exclude_filters == ("!B", "!D")

    def test_invalid_filter_fails_construction(self) -> None:
        """One invalid filter fails the whole construction."""
        with pytest.raises(InvalidFilterError):
            FilterSet.from_filters(["Valid", "in valid"])

    def test_empty_is_empty(self) -> None:
        """No filters = empty set."""
        assert FilterSet.from_filters([]).is_empty is True
        assert FilterSet.from_filters(["A"]).is_empty is False

    def test_frozen(self) -> None:
        """FilterSet is immutable."""
        filter_set = FilterSet.from_filters(["A"])
        with pytest.raises(AttributeError):
            filter_set.include_filters = ("B",)  # type: ignore[misc]


class TestDerivedViews:
    """Tests for for_classes / for_methods."""

    def test_partial_filter(self) -> None:
        """Class-only include: kept for classes, expanded for methods."""
        class_filter = FilterSet.for_classes(["Test"])
        method_filter = FilterSet.for_methods(["Test"])

        assert class_filter.include_filters == ("Test",)
        assert class_filter.exclude_filters == ()
        assert method_filter.include_filters == ("Test:*",)
        assert method_filter.exclude_filters == ()

    def test_negative_partial_filter(self) -> None:
        """Class-only exclude keeps '!' in both views."""
        class_filter = FilterSet.for_classes(["!Test"])
        method_filter = FilterSet.for_methods(["!Test"])

        assert class_filter.include_filters == ()
        assert class_filter.exclude_filters == ("!Test",)
        assert method_filter.include_filters == ()
        assert method_filter.exclude_filters == ("!Test:*",)

    def test_method_filter_passes_class_method_through(self) -> None:
        """Class:method filters are unchanged in the method view."""
        method_filter = FilterSet.for_methods(["Test:run", "!Repo:close"])

        assert method_filter.include_filters == ("Test:run",)
        assert method_filter.exclude_filters == ("!Repo:close",)

    def test_class_view_of_method_include_uses_class_part(self) -> None:
        """Method include lets its class through class filtering."""
        class_filter = FilterSet.for_classes(["Test:run", "Test:stop"])

        assert class_filter.include_filters == ("Test",)
        assert class_filter.is_included("Test") is True

    def test_class_view_ignores_method_specific_exclude(self) -> None:
        """!Repo:close must not exclude the whole Repo class."""
        class_filter = FilterSet.for_classes(["!Repo:close"])

        assert class_filter.exclude_filters == ()
        assert class_filter.is_included("Repo") is True

    def test_class_view_keeps_wildcard_method_exclude(self) -> None:
        """!Repo:* excludes the whole class."""
        class_filter = FilterSet.for_classes(["!Repo:*"])

        assert class_filter.exclude_filters == ("!Repo",)
        assert class_filter.is_included("Repo") is False

    def test_derived_views_validate(self) -> None:
        """Derivation validates raw filters too."""
        with pytest.raises(InvalidFilterError):
            FilterSet.for_methods(["bad filter"])
        with pytest.raises(InvalidFilterError):
            FilterSet.for_classes(["bad filter"])


class TestIsIncluded:
    """Tests for FilterSet.is_included."""

    def test_empty_includes_everything(self) -> None:
        """No rules = everything traced."""
        filter_set = FilterSet()

        assert filter_set.is_included("Anything") is True
        assert filter_set.is_included("Anything:at_all") is True

    def test_exact_include(self) -> None:
        """["Test"] includes Test, not TestObject."""
        filter_set = FilterSet.for_classes(["Test"])

        assert filter_set.is_included("Test") is True
        assert filter_set.is_included("TestObject") is False

    def test_wildcard_include(self) -> None:
        """["Test*"] includes TestObject."""
        assert FilterSet.for_classes(["Test*"]).is_included("TestObject") is True

    def test_exclude_only(self) -> None:
        """["!Test"] excludes Test, includes all others."""
        filter_set = FilterSet.for_classes(["!Test"])

        assert filter_set.is_included("Test") is False
        assert filter_set.is_included("TestObject") is True
        assert filter_set.is_included("Other") is True

    def test_exclude_takes_precedence(self) -> None:
        """Candidate matching include AND exclude is excluded."""
        filter_set = FilterSet.for_methods(["Test", "!Test:secret"])

        assert filter_set.is_included("Test:run") is True
        assert filter_set.is_included("Test:secret") is False

    def test_exclude_precedence_independent_of_order(self) -> None:
        """Exclusion wins regardless of filter order."""
        first = FilterSet.for_methods(["!Test:secret", "Test"])
        second = FilterSet.for_methods(["Test", "!Test:secret"])

        assert first.is_included("Test:secret") is second.is_included("Test:secret") is False

    def test_include_list_restricts(self) -> None:
        """With include rules, unmatched candidates are excluded."""
        filter_set = FilterSet.for_methods(["*:save"])

        assert filter_set.is_included("Repo:save") is True
        assert filter_set.is_included("Repo:load") is False
