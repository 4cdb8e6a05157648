# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Runner contract: the work an operation performs.

The scheduler knows nothing about what a runner does. It calls
``runner.execute(context)`` once per run and records the returned status.

Handler signature for FunctionRunner: (context) -> OperationStatus | None,
sync or async.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from opgraph.core import CancellationToken, OperationStatus

__all__ = (
    "FunctionRunner",
    "NullRunner",
    "OperationRunner",
    "OperationRunnerContext",
    "QueueWork",
    "RunnerRequestRun",
)

WorkFn = Callable[[], Awaitable[OperationStatus]]
QueueWork = Callable[[WorkFn, float], Awaitable[OperationStatus]]
"""Submit work to the concurrency gate: (work_fn, priority) -> status"""

RunnerRequestRun = Callable[..., None]
"""Ask for this operation to run again: (detail: str | None = None) -> None"""


@dataclass(frozen=True)
class OperationRunnerContext:
    """What a runner receives on each invocation.

    Attributes:
        cancellation_token: Cancellation state of the current pass.
        is_first_run: True if the operation has no previous state.
        request_run: Re-run callback, or None when the host did not supply
            one. Cheap while the operation is executing, otherwise forwarded
            to the host as a request for a new pass.
        queue_work: The pass's concurrency gate, for throttled sub-work.
    """

    cancellation_token: CancellationToken
    is_first_run: bool
    request_run: RunnerRequestRun | None
    queue_work: QueueWork


@runtime_checkable
class OperationRunner(Protocol):
    """Anything with a name, a silent flag and an async execute()."""

    name: str
    silent: bool

    async def execute(self, context: OperationRunnerContext) -> OperationStatus: ...


class FunctionRunner:
    """Runner backed by a plain function.

    Example:
        async def compile_(ctx):
            await build()
            return OperationStatus.SUCCESS

        op = Operation("compile", runner=FunctionRunner("compile", compile_))
    """

    def __init__(
        self,
        name: str,
        fn: Callable[[OperationRunnerContext], Any],
        *,
        silent: bool = False,
    ) -> None:
        self.name = name
        self.fn = fn
        self.silent = silent

    async def execute(self, context: OperationRunnerContext) -> OperationStatus:
        if inspect.iscoroutinefunction(self.fn):
            result = await self.fn(context)
        else:
            result = self.fn(context)
            if inspect.isawaitable(result):
                result = await result

        if result is None:
            return OperationStatus.SUCCESS
        return OperationStatus(result)

    def __repr__(self) -> str:
        return f"FunctionRunner(name={self.name!r}, silent={self.silent})"


class NullRunner:
    """Runner that does nothing and reports a fixed status.

    Used for operations that only shape the graph (lifecycle anchors,
    phase boundaries). Silent by default.
    """

    def __init__(
        self,
        name: str,
        result: OperationStatus = OperationStatus.NO_OP,
        *,
        silent: bool = True,
    ) -> None:
        self.name = name
        self.result = result
        self.silent = silent

    async def execute(self, context: OperationRunnerContext) -> OperationStatus:
        return self.result

    def __repr__(self) -> str:
        return f"NullRunner(name={self.name!r}, result={self.result.value})"
