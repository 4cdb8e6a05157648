# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Concurrency gate: bounded, priority-ordered admission of work.

At most ``capacity`` callbacks run at once. Callers that arrive together are
queued before any of them is admitted, so free slots go to the highest
priority rather than to whoever arrived first. When a slot frees up, it goes
to the waiting callback with the highest priority; equal priorities are
admitted in arrival order.
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Awaitable, Callable
from typing import TypeVar

from opgraph.utils.concurrency import Event, checkpoint, get_cancelled_exc_class

__all__ = ("PriorityWorkQueue",)

T = TypeVar("T")


class PriorityWorkQueue:
    """Admission gate for one pass.

    Attributes:
        capacity: Max callbacks inside the gate at once.
        active: Callbacks currently inside the gate.
        peak: Highest value ``active`` has reached.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.active = 0
        self.peak = 0
        # (-priority, arrival, event); the event is set when a slot is handed over
        self._waiters: list[tuple[float, int, Event]] = []
        self._counter = itertools.count()
        self._dispatch_pending = False

    @property
    def pending(self) -> int:
        return len(self._waiters)

    async def submit(self, fn: Callable[[], Awaitable[T]], priority: float = 0) -> T:
        """Wait for a slot, run ``fn`` inside it, release the slot."""
        await self._acquire(priority)
        try:
            return await fn()
        finally:
            self._release()

    async def _acquire(self, priority: float) -> None:
        entry = (-priority, next(self._counter), Event())
        heapq.heappush(self._waiters, entry)
        try:
            if not self._dispatch_pending:
                # One caller per batch yields so the rest of the batch can queue
                self._dispatch_pending = True
                try:
                    await checkpoint()
                finally:
                    self._dispatch_pending = False
                    self._dispatch()
            await entry[2].wait()
        except get_cancelled_exc_class():
            if entry[2].is_set():
                # slot was handed over as we were cancelled
                self._release()
            else:
                self._waiters.remove(entry)
                heapq.heapify(self._waiters)
            raise

    def _dispatch(self) -> None:
        while self._waiters and self.active < self.capacity:
            _, _, event = heapq.heappop(self._waiters)
            self.active += 1
            self.peak = max(self.peak, self.active)
            event.set()

    def _release(self) -> None:
        self.active -= 1
        self._dispatch()

    def __repr__(self) -> str:
        return (
            f"PriorityWorkQueue(capacity={self.capacity}, active={self.active}, "
            f"pending={self.pending})"
        )
