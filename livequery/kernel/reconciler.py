"""
LiveQuery Kernel: Realtime Reconciler

Pure function: (items, batch) -> items
No side effects. No IO. Deterministic.

One batch is folded as a single transition:
  1. partition into modified (by id, last in batch wins), removed (id set),
     added (in batch order)
  2. result = added ++ [item merged with modified[id]
                       for item in items if item.id not in removed]

Added items are prepended, newest first. An add whose id already exists
yields a duplicate; producers are trusted to pair it with a remove.
Entries without an id, or with an unknown type, are skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from livequery.kernel.types import Entity, RealtimeUpdateItem

logger = logging.getLogger(__name__)


def _coerce(entry: RealtimeUpdateItem | Mapping[str, Any]) -> RealtimeUpdateItem | None:
    if isinstance(entry, RealtimeUpdateItem):
        item = entry
    elif isinstance(entry, Mapping):
        item = RealtimeUpdateItem.from_dict(dict(entry))
    else:
        return None
    if item.id is None:
        return None
    return item


def partition_batch(
    batch: Iterable[RealtimeUpdateItem | Mapping[str, Any]],
) -> tuple[dict[Any, Entity], set[Any], list[Entity]]:
    """Split a batch into (modified by id, removed ids, added in order)."""
    modified: dict[Any, Entity] = {}
    removed: set[Any] = set()
    added: list[Entity] = []

    for entry in batch:
        item = _coerce(entry)
        if item is None:
            logger.debug("reconciler: skipping malformed entry %r", entry)
            continue
        if item.type == "modified":
            modified[item.id] = dict(item.data)
        elif item.type == "remove":
            removed.add(item.id)
        elif item.type == "add":
            added.append(dict(item.data))
        else:
            logger.debug("reconciler: skipping unknown update type %r", item.type)

    return modified, removed, added


def apply_realtime(
    items: tuple[Entity, ...],
    batch: Iterable[RealtimeUpdateItem | Mapping[str, Any]],
    include_added: bool = True,
) -> tuple[Entity, ...]:
    """
    Fold a realtime batch into an items sequence.

    Returns the input tuple itself when the batch changes nothing,
    so an empty batch is an identity. With include_added=False only the
    modified and remove entries apply.
    """
    modified, removed, added = partition_batch(batch)
    if not include_added:
        added = []
    if not (modified or removed or added):
        return items

    kept: list[Entity] = []
    for item in items:
        item_id = item.get("id")
        if item_id in removed:
            continue
        patch = modified.get(item_id)
        kept.append({**item, **patch} if patch else item)

    return tuple(added) + tuple(kept)
