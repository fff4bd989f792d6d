"""
LiveQueryContext: the collaborators a collection session consumes.

    ctx = LiveQueryContext.from_settings()
    async with CollectionSync(ctx, "users/u1/posts") as posts:
        ...
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from livequery.client.cache import SnapshotCache
from livequery.client.models import RequestDefaults, RequestOptions
from livequery.client.realtime import RealtimeHub
from livequery.client.transport import HttpTransport, Transport
from livequery.config import settings

OptionsProvider = Callable[[], Awaitable[RequestDefaults]]


async def settings_options() -> RequestDefaults:
    """Default config provider: bearer token from settings, no base query."""
    headers = {}
    if settings.TOKEN:
        headers["Authorization"] = f"Bearer {settings.TOKEN}"
    return RequestDefaults(headers=headers)


class LiveQueryContext:
    """Bundles transport, realtime hub, snapshot cache and config provider."""

    def __init__(
        self,
        transport: Transport,
        hub: RealtimeHub | None = None,
        cache: SnapshotCache | None = None,
        options_provider: OptionsProvider | None = None,
    ):
        self.transport = transport
        self.hub = hub or RealtimeHub()
        self.cache = cache or SnapshotCache()
        self._options_provider = options_provider or settings_options

    @classmethod
    def from_settings(cls, cache_dir: str | None = None) -> LiveQueryContext:
        return cls(HttpTransport(), cache=SnapshotCache(cache_dir))

    async def options(self) -> RequestDefaults:
        """Resolve default request options. Called before each fetch."""
        return await self._options_provider()

    async def request(self, options: RequestOptions):
        return await self.transport.request(options)

    def on(self, key: str, handler) -> None:
        self.hub.on(key, handler)

    def off(self, key: str, handler) -> None:
        self.hub.off(key, handler)
