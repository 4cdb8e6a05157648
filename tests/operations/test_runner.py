# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for opgraph.operations.runner - FunctionRunner and NullRunner."""

from __future__ import annotations

import pytest

from opgraph.core import CancellationToken, OperationStatus
from opgraph.operations import (
    FunctionRunner,
    NullRunner,
    OperationRunner,
    OperationRunnerContext,
)


async def _queue_work(fn, priority):
    return await fn()


def make_context() -> OperationRunnerContext:
    return OperationRunnerContext(
        cancellation_token=CancellationToken.none(),
        is_first_run=True,
        request_run=None,
        queue_work=_queue_work,
    )


class TestFunctionRunner:
    @pytest.mark.anyio
    async def test_async_function(self):
        async def fn(ctx):
            assert ctx.is_first_run
            return OperationStatus.FAILURE

        runner = FunctionRunner("compile", fn)

        assert await runner.execute(make_context()) == OperationStatus.FAILURE

    @pytest.mark.anyio
    async def test_sync_function(self):
        runner = FunctionRunner("lint", lambda ctx: "NO OP")
        assert await runner.execute(make_context()) == OperationStatus.NO_OP

    @pytest.mark.anyio
    async def test_none_means_success(self):
        runner = FunctionRunner("noop", lambda ctx: None)
        assert await runner.execute(make_context()) == OperationStatus.SUCCESS

    @pytest.mark.anyio
    async def test_invalid_result_raises(self):
        runner = FunctionRunner("bad", lambda ctx: "DONE")
        with pytest.raises(ValueError):
            await runner.execute(make_context())

    def test_satisfies_protocol(self):
        assert isinstance(FunctionRunner("x", lambda ctx: None), OperationRunner)
        assert FunctionRunner("x", lambda ctx: None).silent is False


class TestNullRunner:
    @pytest.mark.anyio
    async def test_reports_fixed_status(self):
        runner = NullRunner("anchor")
        assert runner.silent is True
        assert await runner.execute(make_context()) == OperationStatus.NO_OP

    @pytest.mark.anyio
    async def test_custom_status(self):
        runner = NullRunner("done", OperationStatus.SUCCESS, silent=False)
        assert await runner.execute(make_context()) == OperationStatus.SUCCESS
        assert isinstance(runner, OperationRunner)
