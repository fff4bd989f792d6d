"""
Pytest fixtures for livequery session tests.

FakeTransport replays canned responses in order. Setting `hold` to an
asyncio.Event keeps each request in flight until the event is set, which
lets tests interleave realtime batches and extra fetches with a fetch
that is awaiting the transport.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from livequery.client.cache import SnapshotCache
from livequery.client.context import LiveQueryContext
from livequery.client.models import RequestDefaults, RequestOptions
from livequery.client.realtime import RealtimeHub


class FakeTransport:
    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.requests: list[RequestOptions] = []
        self.hold: asyncio.Event | None = None
        self.entered = asyncio.Event()

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def request(self, options: RequestOptions) -> Any:
        self.requests.append(options)
        self.entered.set()
        if self.hold is not None:
            await self.hold.wait()
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


def page(*ids: str, cursor: str | None = None, has_more: bool = False) -> dict:
    return {"items": [{"id": i} for i in ids], "cursor": cursor, "has_more": has_more}


async def settle() -> None:
    """Let spawned tasks run to their next suspension point."""
    for _ in range(10):
        await asyncio.sleep(0)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def hub():
    return RealtimeHub()


@pytest.fixture
def defaults():
    return RequestDefaults(headers={"Authorization": "Bearer test"}, query={})


@pytest.fixture
def ctx(transport, hub, defaults):
    async def provider() -> RequestDefaults:
        return defaults

    return LiveQueryContext(transport, hub=hub, cache=SnapshotCache(), options_provider=provider)
