"""
HTTP transport for remote collections.

Transport.request(options) returns the decoded body: a page dict
({"items", "cursor", "has_more"}) for collection references, the entity
dict for item references, or None for an item that does not exist.
A 404 on a collection reference is an error.
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from typing import Any, Protocol

import httpx

from livequery.client.models import RequestOptions
from livequery.config import settings
from livequery.errors import TransportError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Collaborator contract consumed by CollectionSync."""

    async def request(self, options: RequestOptions) -> Any: ...


def _cache_key(options: RequestOptions) -> str:
    return f"{options.uri}?{json.dumps(options.query, sort_keys=True, default=str)}"


class HttpTransport:
    """httpx-backed transport with an in-process response cache."""

    def __init__(
        self,
        api_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        max_responses: int = 256,
    ):
        self.api_url = (api_url or settings.API_URL).rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout or settings.TIMEOUT)
        self.max_responses = max_responses
        self._responses: OrderedDict[str, Any] = OrderedDict()

    def _url(self, uri: str) -> str:
        return f"{self.api_url}/{uri.lstrip('/')}"

    async def request(self, options: RequestOptions) -> Any:
        """
        GET the reference with the options' query and headers.

        Hooks run first, in order, each returning the options to send.
        A 404 on an item reference is an absent item (None). Any other HTTP
        or network failure raises TransportError.
        """
        for hook in options.hooks:
            options = hook(options)

        key = _cache_key(options)
        if options.cache.use and key in self._responses:
            logger.debug("transport: cache hit for %s", key)
            self._responses.move_to_end(key)
            return self._responses[key]

        params = {k: v for k, v in options.query.items() if v is not None}
        try:
            res = await self.client.get(self._url(options.uri), params=params, headers=options.headers)
            if res.status_code == 404 and not options.is_collection:
                return None
            res.raise_for_status()
            body = res.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{e.response.status_code} from {e.request.url}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"request to {options.uri} failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"invalid JSON from {options.uri}: {e}") from e

        # Collection responses may be wrapped as {"data": {...}}
        if isinstance(body, dict) and isinstance(body.get("data"), dict) and "items" in body["data"]:
            body = body["data"]

        if options.cache.update:
            self._responses[key] = body
            self._responses.move_to_end(key)
            while len(self._responses) > self.max_responses:
                self._responses.popitem(last=False)
        return body

    def clear(self) -> None:
        """Drop every stored response."""
        self._responses.clear()

    async def aclose(self) -> None:
        """Close client."""
        await self.client.aclose()
