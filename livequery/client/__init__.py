"""
LiveQuery client: the IO side.

  transport  : HTTP fetches (httpx)
  realtime   : channel hub + server-sent event listener
  cache      : best-effort snapshot cache
  context    : bundle handed to collection sessions
"""

from livequery.client.cache import SnapshotCache
from livequery.client.context import LiveQueryContext
from livequery.client.models import CollectionPage, RealtimeBatch, RequestDefaults, RequestOptions
from livequery.client.realtime import EventStreamListener, RealtimeHub, Subscription
from livequery.client.transport import HttpTransport, Transport

__all__ = [
    "LiveQueryContext",
    "HttpTransport",
    "Transport",
    "RealtimeHub",
    "Subscription",
    "EventStreamListener",
    "SnapshotCache",
    "RequestOptions",
    "RequestDefaults",
    "CollectionPage",
    "RealtimeBatch",
]
