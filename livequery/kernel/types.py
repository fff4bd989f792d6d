"""
LiveQuery Kernel: Shared Types

Data classes used across the filter normalizer, reference resolver, reconciler
and the collection session. These are the contracts that bind the kernel together.

Every SyncState transition produces a new instance (dataclasses.replace over the
previous snapshot). Nothing in the kernel mutates a state in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Wire constants
# ---------------------------------------------------------------------------

# Operators accepted in a tagged (operator, value) filter expression
OPERATORS: set[str] = {"eq", "ne", "gt", "gte", "lt", "lte", "in"}

LIMIT_KEY = "_limit"
FIELDS_KEY = "_fields"
CURSOR_KEY = "_cursor"
QUERY_KEY = "_q"

RESERVED_QUERY_KEYS: set[str] = {LIMIT_KEY, FIELDS_KEY, CURSOR_KEY, QUERY_KEY}

# Realtime change types
UPDATE_TYPES: set[str] = {"add", "modified", "remove"}

# An entity is any mapping with a stable "id" field.
Entity = dict[str, Any]

# A bare value, None, or a tagged (operator, value) pair.
FilterExpression = Any
FilterExpressionList = dict[str, FilterExpression]
WireFilters = dict[str, Any]

# Opaque server token: a string, or an integer offset.
Cursor = str | int | None


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CacheOption:
    """
    Request cache mode handed to the transport.

    use:    serve a stored response when one exists
    update: store the fresh response
    Neither flag set means bypass.
    """

    use: bool = False
    update: bool = False

    @property
    def bypass(self) -> bool:
        return not (self.use or self.update)

    @classmethod
    def coerce(cls, value: CacheOption | bool | dict | None) -> CacheOption:
        """Accept the shorthand forms: True (use + update), None/False (bypass), a dict."""
        if isinstance(value, CacheOption):
            return value
        if value is True:
            return cls(use=True, update=True)
        if isinstance(value, dict):
            return cls(use=bool(value.get("use")), update=bool(value.get("update")))
        return cls()


@dataclass(frozen=True)
class RefInfo:
    """Result of resolving a reference path."""

    subscription_key: str
    is_collection: bool


@dataclass(frozen=True)
class SyncState:
    """
    The authoritative in-memory record of one collection session.

    items:   the materialized view, newest realtime additions first
    cursor:  server-issued resume point; None means start / no further page
    filters: the active wire filters (never contains the cursor)
    """

    items: tuple[Entity, ...] = ()
    loading: bool = True
    error: BaseException | None = None
    has_more: bool = False
    cursor: Cursor = None
    filters: WireFilters = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return len(self.items) == 0 and not self.loading and self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [dict(i) for i in self.items],
            "loading": self.loading,
            "error": self.error,
            "has_more": self.has_more,
            "cursor": self.cursor,
            "filters": dict(self.filters),
        }


@dataclass(frozen=True)
class RealtimeUpdateItem:
    """A single change notification from the realtime channel."""

    type: str
    data: Entity

    @property
    def id(self) -> Any:
        return self.data.get("id") if isinstance(self.data, dict) else None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": self.data}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RealtimeUpdateItem:
        return cls(type=d.get("type", ""), data=d.get("data") or {})
