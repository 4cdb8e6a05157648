# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Group bookkeeping: start/finish logging for operations sharing a label."""

from __future__ import annotations

from typing import TYPE_CHECKING

from opgraph.core import OperationStatus, Stopwatch

if TYPE_CHECKING:
    from .node import Operation
    from .state import OperationState

__all__ = ("OperationGroupRecord",)


class OperationGroupRecord:
    """Tracks which members of a group are still outstanding in a pass.

    Mutators contain no await points, so they are atomic with respect to the
    other tasks of the pass.

    Attributes:
        name: Group label.
        operations: Every member.
        stopwatch: Started by the first member to execute, stopped by the last.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.operations: set[Operation] = set()
        self.stopwatch = Stopwatch()
        self._remaining: set[Operation] = set()
        self._failures: dict[str, str] = {}
        self._has_cancellations = False
        self._started = False

    def add_operation(self, operation: Operation) -> None:
        self.operations.add(operation)
        self._remaining.add(operation)

    def reset(self) -> None:
        self._remaining = set(self.operations)
        self._failures = {}
        self._has_cancellations = False
        self._started = False
        self.stopwatch = Stopwatch()

    def start_timer(self) -> bool:
        """Start the group timer. Returns True only for the first call."""
        if self._started:
            return False
        self._started = True
        self.stopwatch.start()
        return True

    def set_operation_as_complete(self, operation: Operation, state: OperationState) -> bool:
        """Mark a member finished. Returns True when this completes the group."""
        if operation not in self._remaining:
            return False

        if state.status == OperationStatus.FAILURE:
            self._failures[operation.name] = str(state.error) if state.error else "failed"
        elif state.status == OperationStatus.CANCELLED:
            self._has_cancellations = True

        self._remaining.discard(operation)
        if not self._remaining:
            self.stopwatch.stop()
            return True
        return False

    @property
    def remaining(self) -> frozenset[Operation]:
        return frozenset(self._remaining)

    @property
    def failures(self) -> dict[str, str]:
        """Failure text by operation name."""
        return dict(self._failures)

    @property
    def has_failures(self) -> bool:
        return bool(self._failures)

    @property
    def has_cancellations(self) -> bool:
        return self._has_cancellations

    @property
    def started(self) -> bool:
        return self._started

    @property
    def finished(self) -> bool:
        return not self._remaining

    @property
    def duration(self) -> float:
        return self.stopwatch.duration

    def __len__(self) -> int:
        return len(self.operations)

    def __repr__(self) -> str:
        return (
            f"OperationGroupRecord(name={self.name!r}, operations={len(self.operations)}, "
            f"remaining={len(self._remaining)})"
        )
