"""
Best-effort last-good snapshot cache.

Paints an initial view before the first fetch of a session resolves.
Never the source of truth: the session overwrites it once a fetch lands.
With a directory configured, entries also survive restarts as JSON files.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def snapshot_key(ref: str, options: dict[str, Any]) -> str:
    """Cache key for a reference + session options pair."""
    return f"#cache:{ref}#{json.dumps(options, sort_keys=True, default=str)}"


class SnapshotCache:
    """Key -> list of entities, in memory and optionally on disk."""

    def __init__(self, directory: Path | str | None = None):
        self.directory = Path(directory) if directory else None
        self._data: dict[str, list[dict[str, Any]]] = {}

    def _file(self, key: str) -> Path | None:
        if self.directory is None:
            return None
        digest = hashlib.sha256(key.encode()).hexdigest()[:32]
        return self.directory / f"{digest}.json"

    def get(self, key: str) -> list[dict[str, Any]] | None:
        if key in self._data:
            return self._data[key]

        path = self._file(key)
        if path is None or not path.exists():
            return None
        try:
            items = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("cache: unreadable snapshot %s: %s", path, e)
            return None
        if not isinstance(items, list):
            return None
        self._data[key] = items
        return items

    def set(self, key: str, items: list[dict[str, Any]]) -> None:
        self._data[key] = list(items)

        path = self._file(key)
        if path is None:
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self._data[key], default=str))
        except (OSError, TypeError) as e:
            logger.warning("cache: could not write snapshot %s: %s", path, e)

    def clear(self) -> None:
        self._data.clear()
