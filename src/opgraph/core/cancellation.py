# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Cooperative cancellation.

A CancellationTokenSource owns the flag; a CancellationToken is a read-only view
handed to operations and runners. Nothing is interrupted: code checks
``token.is_cancelled`` at its own suspension points, or races ``token.wait()``
against its own work.

Example:
    source = CancellationTokenSource(delay=30.0)
    status = await manager.execute(parallelism=4, cancellation_token=source.token)

    # elsewhere
    source.cancel()
"""

from __future__ import annotations

import time

import anyio

from opgraph.utils.concurrency import first_completed, sleep, sleep_forever

__all__ = ("CancellationToken", "CancellationTokenSource")


class CancellationTokenSource:
    """Owner of a cancellation flag.

    Args:
        delay: Seconds after construction at which the source cancels itself.
        parent: Token whose cancellation also cancels this source.
    """

    def __init__(
        self,
        delay: float | None = None,
        parent: CancellationToken | None = None,
    ) -> None:
        if delay is not None and delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        self._cancelled = False
        self._event: anyio.Event | None = None
        self._deadline = None if delay is None else time.monotonic() + delay
        self._parent = parent

    @property
    def token(self) -> CancellationToken:
        return CancellationToken(source=self)

    @property
    def is_cancelled(self) -> bool:
        if not self._cancelled:
            if self._parent is not None and self._parent.is_cancelled:
                self.cancel()
            elif self._deadline is not None and time.monotonic() >= self._deadline:
                self.cancel()
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the source. Only the first call has any effect."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    async def wait(self) -> None:
        """Return once the source is cancelled."""
        if self.is_cancelled:
            return
        if self._event is None:
            self._event = anyio.Event()

        waiters = [self._event.wait]
        if self._parent is not None:
            waiters.append(self._parent.wait)
        if self._deadline is not None:
            deadline = self._deadline
            waiters.append(lambda: sleep(max(0.0, deadline - time.monotonic())))

        await first_completed(*waiters)
        self.cancel()

    def __repr__(self) -> str:
        return f"CancellationTokenSource(cancelled={self.is_cancelled})"


class CancellationToken:
    """Read-only view of cancellation state.

    Either a live view of a source, or a fixed value. A fixed non-cancelled
    token can never be cancelled and its ``wait()`` never returns, so callers
    may race it against their own work without a sentinel timeout.
    """

    __slots__ = ("_cancelled", "_source")

    def __init__(
        self,
        source: CancellationTokenSource | None = None,
        *,
        cancelled: bool = False,
    ) -> None:
        if source is not None and cancelled:
            raise ValueError("A source-backed token cannot also be fixed as cancelled")
        self._source = source
        self._cancelled = cancelled

    @classmethod
    def none(cls) -> CancellationToken:
        """Token that is never cancelled."""
        return cls()

    @classmethod
    def cancelled(cls) -> CancellationToken:
        """Token that is already cancelled."""
        return cls(cancelled=True)

    @property
    def is_cancelled(self) -> bool:
        if self._source is not None:
            return self._source.is_cancelled
        return self._cancelled

    @property
    def can_be_cancelled(self) -> bool:
        return self._source is not None or self._cancelled

    async def wait(self) -> None:
        """Return when cancellation occurs; never returns if it cannot."""
        if self._source is not None:
            await self._source.wait()
        elif not self._cancelled:
            await sleep_forever()

    def __repr__(self) -> str:
        kind = "live" if self._source is not None else "fixed"
        return f"CancellationToken({kind}, cancelled={self.is_cancelled})"
