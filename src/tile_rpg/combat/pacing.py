"""Cancellable delays for the automatic enemy turn.

The delay only paces presentation; nothing runs concurrently. A scheduler
hands back a ``PendingCall`` that the battle cancels if it leaves the
awaiting-enemy phase before the call fires.
"""
from __future__ import annotations

from typing import Callable, Protocol


class PendingCall:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self._callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.active:
            return
        self.fired = True
        self._callback()


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> PendingCall: ...


class ImmediateScheduler:
    """Runs every callback as soon as it is scheduled, ignoring the delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> PendingCall:
        call = PendingCall(0.0, callback)
        call.fire()
        return call


class ManualScheduler:
    """Holds callbacks until the owner advances its clock past their due time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._pending: list[PendingCall] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> PendingCall:
        call = PendingCall(self.now + max(delay, 0.0), callback)
        self._pending.append(call)
        return call

    @property
    def pending(self) -> list[PendingCall]:
        return [c for c in self._pending if c.active]

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire everything now due. Returns how many fired."""
        self.now += max(seconds, 0.0)
        fired = 0
        # Callbacks may schedule more calls; keep draining until nothing is due.
        while True:
            due = [c for c in self._pending if c.active and c.due <= self.now]
            if not due:
                break
            for call in sorted(due, key=lambda c: c.due):
                if call.active:
                    call.fire()
                    fired += 1
        self._pending = [c for c in self._pending if c.active]
        return fired

    def run_all(self) -> int:
        """Fire every pending call regardless of its due time."""
        fired = 0
        while self.pending:
            call = min(self.pending, key=lambda c: c.due)
            self.now = max(self.now, call.due)
            call.fire()
            fired += 1
        self._pending = [c for c in self._pending if c.active]
        return fired
