"""Wire models exchanged between the collection session and its transport."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field

from livequery.kernel.types import CacheOption, Cursor


class RequestDefaults(BaseModel):
    """What the config provider supplies before each fetch."""

    headers: dict[str, str] = Field(default_factory=dict)
    query: dict[str, Any] = Field(default_factory=dict)


class RequestOptions(BaseModel):
    """What the session hands to Transport.request()."""

    uri: str
    is_collection: bool = False
    cache: CacheOption = Field(default_factory=CacheOption)
    query: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    hooks: list[Callable[..., Any]] = Field(default_factory=list)


class CollectionPage(BaseModel):
    """One page of a collection fetch."""

    items: list[dict[str, Any]] = Field(default_factory=list)
    cursor: Cursor = None
    has_more: bool = False


class RealtimeBatch(BaseModel):
    """Payload of one realtime channel message."""

    items: list[dict[str, Any]] = Field(default_factory=list)
