# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Stopwatch for operation and group timings."""

from __future__ import annotations

import time

__all__ = ("Stopwatch",)


class Stopwatch:
    """Monotonic stopwatch.

    A fresh stopwatch reads zero. ``start()`` on a running stopwatch is a no-op,
    and ``stop()`` freezes ``duration`` until the next ``start()``.

    Example:
        with Stopwatch() as sw:
            await do_work()
        print(f"{sw.duration:.3f}s")
    """

    def __init__(self) -> None:
        self._start: float | None = None
        self._end: float | None = None

    @classmethod
    def start_new(cls) -> Stopwatch:
        sw = cls()
        sw.start()
        return sw

    @property
    def running(self) -> bool:
        return self._start is not None and self._end is None

    @property
    def duration(self) -> float:
        """Elapsed seconds; live while running."""
        if self._start is None:
            return 0.0
        end = self._end if self._end is not None else time.monotonic()
        return end - self._start

    def start(self) -> Stopwatch:
        if self.running:
            return self
        self._start = time.monotonic()
        self._end = None
        return self

    def stop(self) -> Stopwatch:
        if self.running:
            self._end = time.monotonic()
        return self

    def reset(self) -> Stopwatch:
        self._start = None
        self._end = None
        return self

    def __enter__(self) -> Stopwatch:
        return self.start()

    def __exit__(self, *args) -> None:
        self.stop()

    def __repr__(self) -> str:
        state = "running" if self.running else "stopped"
        return f"Stopwatch({state}, duration={self.duration:.3f}s)"
