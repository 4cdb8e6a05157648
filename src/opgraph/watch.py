# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""WatchLoop - repeats passes whenever a run is requested.

Each pass gets its own CancellationTokenSource linked to the outer token.
A run requested while a pass is executing cancels that pass, and a new pass
starts as soon as it returns. A run requested while idle wakes the loop.

Example:
    manager = OperationExecutionManager(operations)

    async def execute(state: WatchLoopState) -> OperationStatus:
        return await manager.execute(
            parallelism=4,
            cancellation_token=state.cancellation_token,
            request_run=state.request_run,
        )

    loop = WatchLoop(execute, on_before_execute=clear_screen)
    await loop.run_until_cancelled(shutdown.token)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from opgraph.core import CancellationToken, CancellationTokenSource, OperationStatus
from opgraph.errors import AlreadyReportedError
from opgraph.utils.concurrency import Event, first_completed

logger = logging.getLogger(__name__)

__all__ = ("WatchLoop", "WatchLoopState")


@dataclass(frozen=True)
class WatchLoopState:
    """Handed to the execute callback for one pass.

    Attributes:
        cancellation_token: Cancelled when a new run is requested or the
            outer token is cancelled.
        request_run: (requestor, detail=None) -> None; asks for another pass.
    """

    cancellation_token: CancellationToken
    request_run: Callable[..., None]


class WatchLoop:
    """Drives repeated passes over an operation graph.

    Args:
        execute: Runs one pass and returns its status.
        on_before_execute: Called before every pass.
        on_request_run: Called with (requestor, detail) for every request.
        on_cancel: Called when a request cancels an executing pass.
    """

    def __init__(
        self,
        execute: Callable[[WatchLoopState], Awaitable[OperationStatus]],
        *,
        on_before_execute: Callable[[], None] | None = None,
        on_request_run: Callable[[str, str | None], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        self._execute = execute
        self._on_before_execute = on_before_execute
        self._on_request_run = on_request_run
        self._on_cancel = on_cancel

        self._run_requested = True
        self._executing = False
        self._source: CancellationTokenSource | None = None
        self._wake: Event | None = None

    @property
    def run_requested(self) -> bool:
        return self._run_requested

    def request_run(self, requestor: str, detail: str | None = None) -> None:
        """Ask for another pass; cancels the current one if executing."""
        self._run_requested = True
        if detail:
            logger.info("Run requested by %s: %s", requestor, detail)
        else:
            logger.info("Run requested by %s", requestor)

        if self._on_request_run is not None:
            self._on_request_run(requestor, detail)

        source = self._source
        if self._executing and source is not None and not source.is_cancelled:
            source.cancel()
            if self._on_cancel is not None:
                self._on_cancel()

        if self._wake is not None:
            self._wake.set()

    async def run_until_stable(self, cancellation_token: CancellationToken) -> OperationStatus:
        """Run passes until one completes with no further run requested.

        Returns:
            Status of the last pass; CANCELLED if the outer token is
            cancelled first; FAILURE if a pass raised AlreadyReportedError.
        """
        status = OperationStatus.NO_OP
        while self._run_requested:
            if cancellation_token.is_cancelled:
                return OperationStatus.CANCELLED

            self._run_requested = False
            source = CancellationTokenSource(parent=cancellation_token)
            self._source = source

            if self._on_before_execute is not None:
                self._on_before_execute()

            self._executing = True
            try:
                status = await self._execute(
                    WatchLoopState(cancellation_token=source.token, request_run=self.request_run)
                )
            except AlreadyReportedError:
                status = OperationStatus.FAILURE
            finally:
                self._executing = False
                self._source = None

        return status

    async def run_until_cancelled(
        self,
        cancellation_token: CancellationToken,
        on_waiting: Callable[[], None] | None = None,
    ) -> None:
        """Run until the outer token is cancelled, idling between requests."""
        while not cancellation_token.is_cancelled:
            await self.run_until_stable(cancellation_token)

            if on_waiting is not None:
                on_waiting()

            if self._run_requested:
                continue

            self._wake = Event()
            try:
                await first_completed(self._wake.wait, cancellation_token.wait)
            finally:
                self._wake = None
