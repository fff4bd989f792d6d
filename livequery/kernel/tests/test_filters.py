"""
Tests for livequery/kernel/filters.py

Declarative filter list -> wire filters.
"""

from __future__ import annotations

from livequery.kernel.filters import (
    FilterFunctions,
    encode_expression,
    gt,
    gte,
    in_array,
    lt,
    lte,
    ne,
    normalize_filters,
    operator_name,
)


class TestBareValues:
    def test_bare_values_pass_through(self):
        assert normalize_filters({"status": "open", "n": 3}) == {"status": "open", "n": 3}

    def test_falsy_values_are_not_cleared(self):
        wire = normalize_filters({"count": 0, "name": "", "done": False})
        assert wire == {"count": 0, "name": "", "done": False}

    def test_none_clears_key(self):
        assert normalize_filters({"status": None, "owner": "u1"}) == {"owner": "u1"}

    def test_free_text_query_passes_verbatim(self):
        assert normalize_filters({"_q": "hello | world"}) == {"_q": "hello | world"}

    def test_empty_and_missing(self):
        assert normalize_filters({}) == {}
        assert normalize_filters(None) == {}


class TestTaggedPairs:
    def test_operator_pair_encoded(self):
        assert normalize_filters({"age": ("gt", 18)}) == {"age": "gt|18"}

    def test_list_pair_encoded(self):
        assert normalize_filters({"age": ["lte", 65]}) == {"age": "lte|65"}

    def test_string_value_is_json_quoted(self):
        assert normalize_filters({"name": ne("bob")}) == {"name": 'ne|"bob"'}

    def test_in_array_compact_json(self):
        assert normalize_filters({"tag": in_array(["a", "b"])}) == {"tag": 'in|["a","b"]'}

    def test_null_value_inside_pair_is_kept(self):
        assert normalize_filters({"parent": ("ne", None)}) == {"parent": "ne|null"}

    def test_symbol_aliases(self):
        assert normalize_filters({"a": (">=", 1), "b": (FilterFunctions.NE, 2)}) == {
            "a": "gte|1",
            "b": "ne|2",
        }

    def test_helpers(self):
        assert gt(1) == ("gt", 1)
        assert gte(1) == ("gte", 1)
        assert lt(1) == ("lt", 1)
        assert lte(1) == ("lte", 1)

    def test_two_element_list_without_operator_is_bare(self):
        assert encode_expression(["x", "y"]) == ["x", "y"]

    def test_unknown_operator_is_bare(self):
        assert operator_name("like") is None
        assert encode_expression(("like", "a%")) == ("like", "a%")


class TestDeterminism:
    def test_same_input_same_output(self):
        filters = {"age": gt(18), "status": "open", "owner": None, "_q": "x"}
        assert normalize_filters(filters) == normalize_filters(filters)
        assert normalize_filters(filters) == {"age": "gt|18", "status": "open", "_q": "x"}

    def test_never_invents_keys(self):
        filters = {"a": 1, "b": None, "c": ("in", [1, 2])}
        assert set(normalize_filters(filters)) <= set(filters)

    def test_input_not_mutated(self):
        filters = {"a": None, "b": ("gt", 2)}
        normalize_filters(filters)
        assert filters == {"a": None, "b": ("gt", 2)}
