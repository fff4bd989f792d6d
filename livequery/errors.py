"""Exceptions raised by livequery."""

from __future__ import annotations


class LiveQueryError(Exception):
    """Base class for livequery errors."""
    pass


class TransportError(LiveQueryError):
    """Network or HTTP failure while talking to the remote collection."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidReference(LiveQueryError):
    """Reference path is empty or has no segments."""
    pass
