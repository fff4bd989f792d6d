"""
LiveQuery Kernel: the pure core.

Components:
  filters     : declarative filter list -> wire filters
  refs        : reference path -> (subscription key, collection flag)
  gate        : at-most-one in-flight fetch guard
  state       : observable single-owner snapshot cell
  reconciler  : (items, realtime batch) -> items  (pure, deterministic)
"""

from livequery.kernel.filters import (
    FilterFunctions,
    eq,
    gt,
    gte,
    in_array,
    lt,
    lte,
    ne,
    normalize_filters,
)
from livequery.kernel.gate import FetchGate
from livequery.kernel.reconciler import apply_realtime
from livequery.kernel.refs import resolve_ref
from livequery.kernel.state import StateCell
from livequery.kernel.types import CacheOption, RealtimeUpdateItem, RefInfo, SyncState

__all__ = [
    "normalize_filters",
    "FilterFunctions",
    "eq",
    "ne",
    "gt",
    "gte",
    "lt",
    "lte",
    "in_array",
    "resolve_ref",
    "FetchGate",
    "StateCell",
    "apply_realtime",
    "CacheOption",
    "RealtimeUpdateItem",
    "RefInfo",
    "SyncState",
]
