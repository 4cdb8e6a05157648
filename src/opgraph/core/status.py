# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Operation status values.

READY is the initial status after reset and EXECUTING is held while the
runner is active. The remaining five are terminal for a pass.
"""

from __future__ import annotations

from enum import Enum

__all__ = ("OperationStatus", "TERMINAL_STATUSES")


class OperationStatus(str, Enum):
    """Status of one operation, or of a whole pass."""

    READY = "READY"
    EXECUTING = "EXECUTING"
    SUCCESS = "SUCCESS"
    NO_OP = "NO OP"
    FAILURE = "FAILURE"
    CANCELLED = "CANCELLED"
    BLOCKED = "BLOCKED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def succeeded(self) -> bool:
        """True for statuses a consumer may build on."""
        return self in (OperationStatus.SUCCESS, OperationStatus.NO_OP)


TERMINAL_STATUSES: frozenset[OperationStatus] = frozenset(
    {
        OperationStatus.SUCCESS,
        OperationStatus.NO_OP,
        OperationStatus.FAILURE,
        OperationStatus.CANCELLED,
        OperationStatus.BLOCKED,
    }
)
