# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Error hierarchy for operation graphs.

Configuration errors (missing dependency, cycle, duplicate name) are fatal and
raised synchronously while a graph is built. Runner failures are never raised:
they are captured on the operation state and surface as FAILURE.
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = (
    "AlreadyReportedError",
    "CyclicDependencyError",
    "DuplicateOperationError",
    "InternalError",
    "MissingDependencyError",
    "OpGraphError",
    "OperationGraphError",
)


class OpGraphError(Exception):
    """Base class for opgraph errors."""


class OperationGraphError(OpGraphError):
    """The operation set is not a valid graph. Never retried."""


class MissingDependencyError(OperationGraphError):
    def __init__(self, operation: str, dependency: str):
        self.operation = operation
        self.dependency = dependency
        super().__init__(
            f"Operation {operation!r} declares a dependency on operation "
            f"{dependency!r} that is not in the set of operations to execute."
        )


class CyclicDependencyError(OperationGraphError):
    """A dependency cycle was found.

    Attributes:
        cycle: Operation names in dependency order; the first and last entries
            are the same operation.
    """

    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        path = "\n  -> ".join(self.cycle)
        super().__init__(f"A cyclic dependency was encountered:\n  {path}")


class DuplicateOperationError(OperationGraphError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"More than one operation is named {name!r}.")


class InternalError(OpGraphError):
    """An invariant of the scheduler was violated."""

    def __init__(self, message: str):
        super().__init__(f"Internal error: {message}")


class AlreadyReportedError(OpGraphError):
    """Failure whose details were already logged; callers should not log again."""

    def __init__(self, message: str = "An error occurred and has already been reported."):
        super().__init__(message)
