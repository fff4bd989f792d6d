"""
Tests for livequery/kernel/state.py and the SyncState snapshot.
"""

from __future__ import annotations

import dataclasses

import pytest

from livequery.kernel.state import StateCell
from livequery.kernel.types import CacheOption, SyncState


class TestStateCell:
    def test_update_applies_transition_and_notifies(self):
        cell = StateCell(SyncState())
        seen = []
        cell.subscribe(seen.append)

        result = cell.update(lambda s: dataclasses.replace(s, loading=False))

        assert result.loading is False
        assert cell.value is result
        assert seen == [result]

    def test_identity_transition_does_not_notify(self):
        cell = StateCell(SyncState())
        seen = []
        cell.subscribe(seen.append)
        cell.update(lambda s: s)
        assert seen == []

    def test_unsubscribe(self):
        cell = StateCell(0)
        seen = []
        unsubscribe = cell.subscribe(seen.append)
        cell.set(1)
        unsubscribe()
        unsubscribe()
        cell.set(2)
        assert seen == [1]

    def test_previous_snapshot_untouched(self):
        cell = StateCell(SyncState(items=({"id": 1},)))
        before = cell.value
        cell.update(lambda s: dataclasses.replace(s, items=s.items + ({"id": 2},)))
        assert before.items == ({"id": 1},)


class TestSyncState:
    def test_defaults(self):
        s = SyncState()
        assert s.items == ()
        assert s.loading is True
        assert s.error is None
        assert s.has_more is False
        assert s.cursor is None
        assert s.filters == {}

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            SyncState().loading = False

    def test_empty_flag(self):
        assert SyncState(loading=False).empty is True
        assert SyncState(loading=True).empty is False
        assert SyncState(loading=False, error=RuntimeError("x")).empty is False
        assert SyncState(loading=False, items=({"id": 1},)).empty is False


class TestCacheOption:
    def test_coerce(self):
        assert CacheOption.coerce(True) == CacheOption(use=True, update=True)
        assert CacheOption.coerce(None).bypass
        assert CacheOption.coerce({}).bypass
        assert CacheOption.coerce({"update": True}) == CacheOption(update=True)
        opt = CacheOption(use=True)
        assert CacheOption.coerce(opt) is opt
