"""
Tests for livequery/kernel/refs.py
"""

from __future__ import annotations

import pytest

from livequery.errors import InvalidReference
from livequery.kernel.refs import resolve_ref, split_ref


class TestClassification:
    def test_odd_segments_is_collection(self):
        info = resolve_ref("a/b/c")
        assert info.is_collection is True
        assert info.subscription_key == "a/b/c"

    def test_even_segments_is_item(self):
        info = resolve_ref("a/b")
        assert info.is_collection is False
        assert info.subscription_key == "a"

    def test_single_segment_collection(self):
        info = resolve_ref("users")
        assert info.is_collection is True
        assert info.subscription_key == "users"

    def test_nested_item_drops_id(self):
        assert resolve_ref("users/u1/posts/p1").subscription_key == "users/u1/posts"

    def test_content_does_not_matter(self):
        assert resolve_ref("1/2/3").is_collection is True
        assert resolve_ref("x-y/__").is_collection is False


class TestNormalization:
    def test_query_component_stripped(self):
        info = resolve_ref("users/u1/posts?status=open&x=a/b")
        assert info.is_collection is True
        assert info.subscription_key == "users/u1/posts"

    def test_surrounding_slashes_stripped(self):
        info = resolve_ref("/users/u1/")
        assert info.is_collection is False
        assert info.subscription_key == "users"

    def test_split_ref(self):
        assert split_ref("/a/b?c=d") == ["a", "b"]
        assert split_ref("") == []


class TestEmpty:
    @pytest.mark.parametrize("ref", ["", "/", "?x=1"])
    def test_empty_reference_raises(self, ref):
        with pytest.raises(InvalidReference):
            resolve_ref(ref)
