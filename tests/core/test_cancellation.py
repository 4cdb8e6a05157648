# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for opgraph.core.cancellation."""

from __future__ import annotations

import anyio
import pytest

from opgraph.core import CancellationToken, CancellationTokenSource


class TestFixedTokens:
    """Tokens that are not backed by a source."""

    def test_none_is_never_cancelled(self):
        token = CancellationToken.none()
        assert token.is_cancelled is False
        assert token.can_be_cancelled is False

    def test_cancelled_is_always_cancelled(self):
        token = CancellationToken.cancelled()
        assert token.is_cancelled is True
        assert token.can_be_cancelled is True

    def test_source_and_fixed_value_are_exclusive(self):
        with pytest.raises(ValueError):
            CancellationToken(CancellationTokenSource(), cancelled=True)

    @pytest.mark.anyio
    async def test_wait_on_cancelled_token_returns(self):
        with anyio.fail_after(1):
            await CancellationToken.cancelled().wait()

    @pytest.mark.anyio
    async def test_wait_on_uncancellable_token_never_returns(self):
        with anyio.move_on_after(0.05) as scope:
            await CancellationToken.none().wait()
        assert scope.cancelled_caught


class TestCancellationTokenSource:
    """Tests for source-backed cancellation."""

    def test_token_reflects_live_state(self):
        source = CancellationTokenSource()
        token = source.token
        assert token.is_cancelled is False
        assert token.can_be_cancelled is True

        source.cancel()
        assert token.is_cancelled is True
        assert source.is_cancelled is True

    def test_cancel_is_idempotent(self):
        source = CancellationTokenSource()
        source.cancel()
        source.cancel()
        assert source.is_cancelled is True

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            CancellationTokenSource(delay=-1)

    def test_delay_not_yet_elapsed(self):
        source = CancellationTokenSource(delay=60)
        assert source.is_cancelled is False

    @pytest.mark.anyio
    async def test_wait_returns_after_cancel(self):
        source = CancellationTokenSource()
        done: list[bool] = []

        async def waiter():
            await source.token.wait()
            done.append(True)

        with anyio.fail_after(1):
            async with anyio.create_task_group() as tg:
                tg.start_soon(waiter)
                await anyio.sleep(0.01)
                assert done == []
                source.cancel()

        assert done == [True]

    @pytest.mark.anyio
    async def test_many_waiters_released_by_one_cancel(self):
        source = CancellationTokenSource()
        released: list[int] = []

        async def waiter(i: int):
            await source.token.wait()
            released.append(i)

        with anyio.fail_after(1):
            async with anyio.create_task_group() as tg:
                for i in range(3):
                    tg.start_soon(waiter, i)
                await anyio.sleep(0.01)
                source.cancel()

        assert sorted(released) == [0, 1, 2]

    @pytest.mark.anyio
    async def test_wait_after_cancel_returns_immediately(self):
        source = CancellationTokenSource()
        source.cancel()
        with anyio.fail_after(1):
            await source.token.wait()

    @pytest.mark.anyio
    async def test_delay_cancels_source(self):
        source = CancellationTokenSource(delay=0.01)
        with anyio.fail_after(1):
            await source.token.wait()
        assert source.is_cancelled is True

    @pytest.mark.anyio
    async def test_delay_observed_by_polling(self):
        source = CancellationTokenSource(delay=0.01)
        await anyio.sleep(0.05)
        assert source.token.is_cancelled is True


class TestLinkedSources:
    """A source with a parent token follows the parent."""

    def test_parent_cancel_propagates(self):
        parent = CancellationTokenSource()
        child = CancellationTokenSource(parent=parent.token)
        assert child.is_cancelled is False

        parent.cancel()
        assert child.is_cancelled is True

    def test_child_cancel_does_not_propagate_up(self):
        parent = CancellationTokenSource()
        child = CancellationTokenSource(parent=parent.token)
        child.cancel()
        assert child.is_cancelled is True
        assert parent.is_cancelled is False

    @pytest.mark.anyio
    async def test_child_wait_released_by_parent(self):
        parent = CancellationTokenSource()
        child = CancellationTokenSource(parent=parent.token)

        with anyio.fail_after(1):
            async with anyio.create_task_group() as tg:
                tg.start_soon(child.token.wait)
                await anyio.sleep(0.01)
                parent.cancel()

        assert child.is_cancelled is True
