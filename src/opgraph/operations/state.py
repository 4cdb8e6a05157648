# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Per-run operation state."""

from __future__ import annotations

from dataclasses import dataclass, field

from opgraph.core import OperationStatus, Stopwatch

__all__ = ("OperationState",)


@dataclass
class OperationState:
    """State of one operation for one pass.

    Attributes:
        status: READY until executed, then a terminal status.
        error: Exception raised by the runner, if any.
        stopwatch: Time spent inside the concurrency gate.
    """

    status: OperationStatus = OperationStatus.READY
    error: BaseException | None = None
    stopwatch: Stopwatch = field(default_factory=Stopwatch)

    @property
    def duration(self) -> float:
        return self.stopwatch.duration
