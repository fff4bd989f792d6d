"""
LiveQuery Kernel: Fetch Gate

Two-state exclusion flag (Idle / InFlight) scoped to one session.
A second fetch while one is in flight is dropped, not queued.

    if not gate.try_enter():
        return
    try:
        ...
    finally:
        gate.exit()

There is no await between the check and the set, so under cooperative
scheduling the gate needs no lock.
"""

from __future__ import annotations

from enum import Enum


class GateState(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class FetchGate:
    """Non-reentrant at-most-one guard for in-flight fetches."""

    def __init__(self) -> None:
        self._state = GateState.IDLE

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def held(self) -> bool:
        return self._state is GateState.IN_FLIGHT

    def try_enter(self) -> bool:
        """Take the gate. Returns False, changing nothing, if it is already held."""
        if self._state is GateState.IN_FLIGHT:
            return False
        self._state = GateState.IN_FLIGHT
        return True

    def exit(self) -> None:
        """Release the gate unconditionally."""
        self._state = GateState.IDLE
