"""
LiveQuery: keeps local collections in sync with a paginated HTTP API
and its realtime event stream.
"""

from livequery.client.context import LiveQueryContext
from livequery.collection import CollectionOptions, CollectionSync
from livequery.errors import InvalidReference, LiveQueryError, TransportError
from livequery.kernel.types import CacheOption, SyncState

__all__ = [
    "LiveQueryContext",
    "CollectionSync",
    "CollectionOptions",
    "CacheOption",
    "SyncState",
    "LiveQueryError",
    "TransportError",
    "InvalidReference",
]
