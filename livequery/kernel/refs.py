"""
LiveQuery Kernel: Reference Resolver

Pure function: reference path -> RefInfo

Classification depends only on segment count parity:
  odd  -> collection     ("users", "users/u1/posts")
  even -> single item    ("users/u1")

The subscription key is the collection path: the item id segment is
dropped for item references.
"""

from __future__ import annotations

from livequery.errors import InvalidReference
from livequery.kernel.types import RefInfo


def split_ref(ref: str) -> list[str]:
    """Strip the query component and surrounding slashes, split into segments."""
    path = ref.split("?", 1)[0].strip("/")
    if not path:
        return []
    return path.split("/")


def resolve_ref(ref: str) -> RefInfo:
    """
    Resolve a reference into its subscription key and collection flag.

    Callers treat an empty reference as an inactive session and never
    resolve it; resolving one directly raises InvalidReference.
    """
    segments = split_ref(ref or "")
    if not segments:
        raise InvalidReference(f"empty reference: {ref!r}")

    is_collection = len(segments) % 2 == 1
    key_segments = segments if is_collection else segments[:-1]
    return RefInfo(subscription_key="/".join(key_segments), is_collection=is_collection)
