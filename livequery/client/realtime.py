"""
Realtime channel and connectivity signal.

RealtimeHub is the in-process dispatcher the session registers against:
batch handlers are keyed by subscription key, and the reserved "connected"
key carries the reconnect attempt counter (0 = first connection).

EventStreamListener feeds a hub from a server-sent event stream:

    event: users/u1/posts
    data: {"items": [{"type": "add", "data": {"id": "p9"}}]}
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from livequery.client.models import RealtimeBatch
from livequery.config import settings
from livequery.errors import TransportError

logger = logging.getLogger(__name__)

CONNECTED = "connected"

Handler = Callable[..., Any]


class Subscription:
    """Handle for one registered handler. close() is idempotent."""

    def __init__(self, hub: RealtimeHub, key: str, handler: Handler):
        self.hub = hub
        self.key = key
        self.handler = handler
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.hub.off(self.key, self.handler)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class RealtimeHub:
    """Key -> handlers registry with synchronous dispatch."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, key: str, handler: Handler) -> None:
        self._handlers.setdefault(key, []).append(handler)

    def off(self, key: str, handler: Handler) -> None:
        handlers = self._handlers.get(key)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[key]

    def subscribe(self, key: str, handler: Handler) -> Subscription:
        self.on(key, handler)
        return Subscription(self, key, handler)

    def listeners(self, key: str) -> list[Handler]:
        return list(self._handlers.get(key, []))

    def emit(self, key: str, *args: Any) -> int:
        """Call every handler registered for key. Returns how many ran."""
        handlers = self.listeners(key)
        for handler in handlers:
            handler(*args)
        return len(handlers)


class EventStreamListener:
    """Reads a server-sent event stream and dispatches batches into a hub."""

    def __init__(
        self,
        hub: RealtimeHub,
        url: str | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        reconnect_delay: float | None = None,
    ):
        self.hub = hub
        self.url = url or settings.realtime_url
        self.headers = headers or {}
        self.client = client or httpx.AsyncClient(timeout=None)
        self.reconnect_delay = settings.RECONNECT_DELAY if reconnect_delay is None else reconnect_delay
        self.attempt = 0
        self._stopped = False

    def _dispatch(self, event_type: str, raw: str) -> None:
        try:
            batch = RealtimeBatch.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.warning("realtime: skipping malformed batch for %s: %r", event_type, raw[:200])
            return
        self.hub.emit(event_type, {"items": batch.items})

    async def listen_once(self) -> None:
        """Hold one stream connection until the server closes it."""
        headers = {"Accept": "text/event-stream", **self.headers}
        try:
            async with self.client.stream("GET", self.url, headers=headers) as response:
                response.raise_for_status()

                self.hub.emit(CONNECTED, self.attempt)
                self.attempt += 1

                event_type = None
                data: list[str] = []
                async for line in response.aiter_lines():
                    line = line.rstrip("\r\n")

                    # A blank line ends the event; an unfinished one at EOF is dropped
                    if not line:
                        if event_type and data:
                            self._dispatch(event_type, "\n".join(data))
                        event_type = None
                        data = []
                        continue

                    if line.startswith("event:"):
                        event_type = line[6:].strip()
                    elif line.startswith("data:"):
                        data.append(line[5:].strip())
        except httpx.HTTPError as e:
            raise TransportError(f"realtime stream {self.url} failed: {e}") from e

    async def run(self) -> None:
        """Listen until stop(), reconnecting after each disconnect."""
        while not self._stopped:
            try:
                await self.listen_once()
            except TransportError as e:
                logger.warning("realtime: %s", e)
            if self._stopped:
                break
            await asyncio.sleep(self.reconnect_delay)

    def stop(self) -> None:
        self._stopped = True

    async def aclose(self) -> None:
        self.stop()
        await self.client.aclose()
