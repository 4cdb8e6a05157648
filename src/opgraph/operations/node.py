# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Operation: a node in the dependency graph and its per-pass state machine.

Operation.execute() is the single entry point. It may be called any number
of times, concurrently, within a pass; the first call does the work and every
other call waits for the same result. Each call:

1. Executes every dependency concurrently and waits for all of them.
2. Stops as CANCELLED if the pass was cancelled, or as BLOCKED if any
   dependency raised, failed or was blocked.
3. Enters the concurrency gate at this operation's priority and runs the
   runner, re-running it immediately while re-runs are requested.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

from opgraph.core import CancellationToken, OperationStatus
from opgraph.errors import InternalError
from opgraph.utils.concurrency import Event, gather_settled

from .runner import OperationRunner, OperationRunnerContext, QueueWork
from .state import OperationState

logger = logging.getLogger(__name__)

__all__ = ("ExecuteOperationContext", "Operation", "RequestRunCallback")

RequestRunCallback = Callable[..., None]
"""Host callback for a new pass: (requestor: str, detail: str | None = None) -> None"""

ExecuteHook = Callable[["Operation", OperationState], Awaitable[None]]


@dataclass(frozen=True)
class ExecuteOperationContext:
    """Shared by every operation of a pass.

    Attributes:
        cancellation_token: Cancellation state of the pass.
        queue_work: Concurrency gate.
        before_execute: Called once admitted, before the runner starts.
        after_execute: Called after the runner settles.
        request_run: Host callback asking for a whole new pass.
    """

    cancellation_token: CancellationToken
    queue_work: QueueWork
    before_execute: ExecuteHook
    after_execute: ExecuteHook
    request_run: RequestRunCallback | None = None


class Operation:
    """Executable graph node.

    Edges are kept symmetric: ``a.add_dependency(b)`` puts ``b`` in
    ``a.dependencies`` and ``a`` in ``b.consumers``.

    Attributes:
        name: Unique name, used for logging and diagnostics.
        runner: Work to perform. None makes this a shape-only node that
            settles as NO_OP.
        group_name: Optional label for group start/finish logging.
        weight: Contribution to priority. 1 is an average operation, 0 is
            nearly free, larger values are started earlier.
        priority: Critical path length, set when the graph is analyzed.
        state: State of the current pass; None until the first reset().
        last_state: State of the previous pass.
        metadata: Free-form data for hosts and runners.
    """

    def __init__(
        self,
        name: str,
        *,
        runner: OperationRunner | None = None,
        group_name: str | None = None,
        weight: float = 1,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if weight < 0:
            raise ValueError(f"Operation {name!r}: weight must be non-negative, got {weight}")

        self.name = name
        self.runner = runner
        self.group_name = group_name
        self.weight = weight
        self.metadata: dict[str, Any] = metadata or {}

        self.dependencies: set[Operation] = set()
        self.consumers: set[Operation] = set()

        self.priority: float | None = None
        self.state: OperationState | None = None
        self.last_state: OperationState | None = None

        self._done: Event | None = None
        self._status: OperationStatus | None = None
        self._exception: Exception | None = None
        self._run_pending = True

    @property
    def silent(self) -> bool:
        """True if the runner is marked silent; such operations do not count as work."""
        return self.runner is not None and bool(getattr(self.runner, "silent", False))

    @property
    def status(self) -> OperationStatus | None:
        return None if self.state is None else self.state.status

    @property
    def run_pending(self) -> bool:
        return self._run_pending

    def add_dependency(self, dependency: Operation) -> None:
        self.dependencies.add(dependency)
        dependency.consumers.add(self)

    def delete_dependency(self, dependency: Operation) -> None:
        self.dependencies.discard(dependency)
        dependency.consumers.discard(self)

    def reset(self) -> None:
        """Start a new pass: keep the previous state, begin a fresh one."""
        self.last_state = self.state
        self.state = OperationState()
        self._done = None
        self._status = None
        self._exception = None
        self._run_pending = True

    async def execute(self, context: ExecuteOperationContext) -> OperationStatus:
        """Run this operation once for the current pass and return its status."""
        state = self.state
        if state is None:
            raise InternalError(f"Operation {self.name!r} state has not been initialized.")

        if self._done is not None:
            await self._done.wait()
            if self._exception is not None:
                raise self._exception
            return self._status or state.status

        self._done = Event()
        try:
            self._status = await self._execute_inner(context, state)
        except Exception as e:
            self._exception = e
            raise
        finally:
            self._done.set()
        return self._status

    async def _execute_inner(
        self, context: ExecuteOperationContext, state: OperationState
    ) -> OperationStatus:
        results = await gather_settled(
            partial(dependency.execute, context) for dependency in self.dependencies
        )

        token = context.cancellation_token
        if token.is_cancelled:
            state.status = OperationStatus.CANCELLED
            return state.status

        for result in results:
            if result.rejected or result.value in (
                OperationStatus.BLOCKED,
                OperationStatus.FAILURE,
            ):
                state.status = OperationStatus.BLOCKED
                return state.status

        state.status = OperationStatus.READY

        runner_context = OperationRunnerContext(
            cancellation_token=token,
            is_first_run=self.last_state is None,
            request_run=self._make_request_run(context.request_run),
            queue_work=context.queue_work,
        )

        async def work() -> OperationStatus:
            if token.is_cancelled:
                state.status = OperationStatus.CANCELLED
                return state.status

            await context.before_execute(self, state)
            state.stopwatch.start()

            while self._run_pending:
                self._run_pending = False
                state.status = OperationStatus.EXECUTING
                try:
                    if self.runner is None:
                        state.status = OperationStatus.NO_OP
                    else:
                        state.status = OperationStatus(await self.runner.execute(runner_context))
                except Exception as e:
                    state.status = OperationStatus.FAILURE
                    state.error = e

                if self._run_pending:
                    if token.is_cancelled:
                        state.status = OperationStatus.CANCELLED
                        break
                    logger.info("%s: Immediate rerun requested. Executing.", self.name)

            state.stopwatch.stop()
            await context.after_execute(self, state)
            return state.status

        state.status = await context.queue_work(work, self.priority or 0)
        return state.status

    def _make_request_run(
        self, outer: RequestRunCallback | None
    ) -> Callable[..., None] | None:
        if outer is None:
            return None

        def request_run(detail: str | None = None) -> None:
            # Runners may hold on to this callback across passes
            status = self.status
            if status in (OperationStatus.READY, OperationStatus.EXECUTING):
                self._run_pending = True
            elif status is not None and status.is_terminal:
                outer(self.name, detail)
            else:
                raise InternalError(f"Unexpected status: {status}")

        return request_run

    def __repr__(self) -> str:
        status = self.status.value if self.status is not None else "unset"
        return f"Operation(name={self.name!r}, status={status}, priority={self.priority})"
