# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Core primitives: status values, stopwatch, cancellation."""

from __future__ import annotations

from .cancellation import CancellationToken, CancellationTokenSource
from .status import TERMINAL_STATUSES, OperationStatus
from .stopwatch import Stopwatch

__all__ = (
    "TERMINAL_STATUSES",
    "CancellationToken",
    "CancellationTokenSource",
    "OperationStatus",
    "Stopwatch",
)
