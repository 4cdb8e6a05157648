# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Watch Build: a small build graph driven by WatchLoop.

Demonstrates:
- Operations wired into a graph with groups and weights
- Bounded parallel passes with priority admission
- A finished operation asking for another pass
- Rich summary table after every pass
"""

from __future__ import annotations

import logging

import anyio

from opgraph import (
    CancellationTokenSource,
    FunctionRunner,
    NullRunner,
    Operation,
    OperationExecutionManager,
    OperationStatus,
    WatchLoop,
    WatchLoopState,
)
from opgraph.utils.display import phase, print_summary, status

PASSES = 2


def build_graph() -> tuple[list[Operation], dict]:
    """Start -> {lint, compile} -> test -> Finish."""
    seen = {"compile": 0}
    callbacks = {}

    async def lint(ctx):
        await anyio.sleep(0.05)

    async def compile_(ctx):
        seen["compile"] += 1
        callbacks["compile"] = ctx.request_run
        await anyio.sleep(0.1)
        return OperationStatus.SUCCESS if ctx.is_first_run else OperationStatus.NO_OP

    async def test(ctx):
        await anyio.sleep(0.05)

    start = Operation("start", runner=NullRunner("start"))
    lint_op = Operation("lint", runner=FunctionRunner("lint", lint), group_name="check")
    compile_op = Operation(
        "compile", runner=FunctionRunner("compile", compile_), group_name="build", weight=3
    )
    test_op = Operation("test", runner=FunctionRunner("test", test), group_name="check")
    finish = Operation("finish", runner=NullRunner("finish"))

    lint_op.add_dependency(start)
    compile_op.add_dependency(start)
    test_op.add_dependency(compile_op)
    finish.add_dependency(lint_op)
    finish.add_dependency(test_op)

    return [start, lint_op, compile_op, test_op, finish], callbacks


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    operations, callbacks = build_graph()
    manager = OperationExecutionManager(operations)
    shutdown = CancellationTokenSource()
    passes = 0

    async def execute(state: WatchLoopState) -> OperationStatus:
        nonlocal passes
        passes += 1
        phase(f"Pass {passes}")
        result = await manager.execute(
            parallelism=2,
            cancellation_token=state.cancellation_token,
            request_run=state.request_run,
        )
        print_summary(manager.summarize())
        return result

    def on_waiting() -> None:
        if passes < PASSES:
            status("Simulating a source change in compile...", style="muted")
            callbacks["compile"]("src/main.c changed")
        else:
            status("Done.", style="success")
            shutdown.cancel()

    loop = WatchLoop(execute)
    await loop.run_until_cancelled(shutdown.token, on_waiting)


if __name__ == "__main__":
    anyio.run(main)
