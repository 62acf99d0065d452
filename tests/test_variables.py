"""Tests for placeholder extraction, interpolation and the variable store."""
from __future__ import annotations

import pytest
from orchestra_core.errors import DuplicateOutputVariableError, UndefinedVariableError
from orchestra_workflow.invocation import parse
from orchestra_workflow.variables import VariableStore, extract_references, interpolate


class TestExtractReferences:
    def test_first_occurrence_order_without_duplicates(self) -> None:
        refs = extract_references("merge {b} with {a}, then {b} again and {c_1}")

        assert refs == ["b", "a", "c_1"]

    def test_no_placeholders(self) -> None:
        assert extract_references("plain instruction text") == []

    def test_malformed_braces_are_not_matched(self) -> None:
        text = 'json {"key": 1} and { spaced } and {} and {unclosed'

        assert extract_references(text) == []

    def test_hyphenated_names(self) -> None:
        assert extract_references("use {scan-results}") == ["scan-results"]


class TestInterpolate:
    def test_substitutes_every_reference(self) -> None:
        store = VariableStore()
        store.bind("bugs", "null deref in parser.py")
        store.bind("module", "auth")

        result = interpolate("patch {bugs} in {module}; recheck {bugs}", store)

        assert result == (
            "patch null deref in parser.py in auth; recheck null deref in parser.py"
        )

    def test_text_without_placeholders_is_unchanged(self) -> None:
        text = "no variables {here at all"

        assert extract_references(text) == []
        assert interpolate(text, VariableStore()) == text

    def test_unbound_reference_raises(self) -> None:
        """Scenario: fix:"patch {bugs}" evaluated before bugs is bound."""
        inv = parse('fix:"patch {bugs}"')

        with pytest.raises(UndefinedVariableError, match="bugs") as info:
            interpolate(inv.instruction, VariableStore())

        assert info.value.name == "bugs"

    def test_reports_first_unresolved_reference(self) -> None:
        store = VariableStore()
        store.bind("a", "1")

        with pytest.raises(UndefinedVariableError) as info:
            interpolate("{a} {missing} {other}", store)

        assert info.value.name == "missing"

    def test_failure_leaves_store_unmodified(self) -> None:
        store = VariableStore()
        store.bind("a", "1")

        with pytest.raises(UndefinedVariableError):
            interpolate("{a} {b}", store)

        assert store.as_dict() == {"a": "1"}

    def test_success_leaves_no_placeholder_tokens(self) -> None:
        store = VariableStore()
        store.bind("x", "value")

        result = interpolate("{x}-{x}", store)

        assert extract_references(result) == []

    def test_values_are_not_reexpanded(self) -> None:
        store = VariableStore()
        store.bind("a", "{b}")
        store.bind("b", "never")

        assert interpolate("see {a}", store) == "see {b}"

    def test_backslashes_in_values_are_literal(self) -> None:
        store = VariableStore()
        store.bind("path", r"C:\new\dir")

        assert interpolate("open {path}", store) == r"open C:\new\dir"

    def test_accepts_plain_mapping(self) -> None:
        assert interpolate("hi {name}", {"name": "there"}) == "hi there"


class TestVariableStore:
    def test_bind_and_lookup(self) -> None:
        store = VariableStore()
        store.bind("bugs", "three bugs")

        assert "bugs" in store
        assert store["bugs"] == "three bugs"
        assert store.get("missing") is None
        assert store.names() == ("bugs",)
        assert len(store) == 1

    def test_duplicate_bind_raises(self) -> None:
        store = VariableStore()
        store.bind("bugs", "first")

        with pytest.raises(DuplicateOutputVariableError, match="bugs") as info:
            store.bind("bugs", "second")

        assert info.value.name == "bugs"
        assert store["bugs"] == "first"

    def test_missing_lookup_raises_undefined(self) -> None:
        with pytest.raises(UndefinedVariableError):
            VariableStore()["nope"]

    def test_invalid_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            VariableStore().bind("not valid", "x")

    def test_stores_are_isolated(self) -> None:
        first, second = VariableStore(), VariableStore()
        first.bind("shared", "one")

        second.bind("shared", "two")

        assert first["shared"] == "one"
        assert second["shared"] == "two"
