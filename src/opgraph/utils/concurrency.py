# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Thin anyio helpers shared by the scheduler and the watch loop."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import anyio
import anyio.lowlevel

__all__ = (
    "Event",
    "Settled",
    "checkpoint",
    "create_task_group",
    "first_completed",
    "gather_settled",
    "get_cancelled_exc_class",
    "sleep",
    "sleep_forever",
)

T = TypeVar("T")

Event = anyio.Event
checkpoint = anyio.lowlevel.checkpoint
create_task_group = anyio.create_task_group
get_cancelled_exc_class = anyio.get_cancelled_exc_class
sleep = anyio.sleep
sleep_forever = anyio.sleep_forever


@dataclass
class Settled(Generic[T]):
    """Outcome of one awaitable: a value or the exception it raised."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def rejected(self) -> bool:
        return self.error is not None


async def gather_settled(fns: Iterable[Callable[[], Awaitable[T]]]) -> list[Settled[T]]:
    """Run every callable concurrently and wait for all of them.

    Unlike a plain task group, one failure does not cancel the siblings:
    every outcome is collected, in input order.
    """
    fns = list(fns)
    if not fns:
        return []
    results: list[Settled[T]] = [Settled() for _ in fns]

    async def _run(index: int, fn: Callable[[], Awaitable[T]]) -> None:
        try:
            results[index].value = await fn()
        except Exception as e:
            results[index].error = e

    async with create_task_group() as tg:
        for index, fn in enumerate(fns):
            tg.start_soon(_run, index, fn)

    return results


async def first_completed(*fns: Callable[[], Awaitable[Any]]) -> None:
    """Return as soon as any callable finishes; cancel the rest."""
    async with create_task_group() as tg:

        async def _run(fn: Callable[[], Awaitable[Any]]) -> None:
            await fn()
            tg.cancel_scope.cancel()

        for fn in fns:
            tg.start_soon(_run, fn)
