# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Pass summary: one record per operation after a pass completes."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from opgraph.core import OperationStatus

if TYPE_CHECKING:
    from .node import Operation

__all__ = ("ExecutionSummary", "OperationRecord")


class OperationRecord(BaseModel):
    """Outcome of one operation in one pass."""

    name: str
    group: str | None = None
    status: OperationStatus | None = None
    previous_status: OperationStatus | None = None
    duration: float = 0.0
    error: str | None = None
    silent: bool = False

    @classmethod
    def from_operation(cls, operation: Operation) -> OperationRecord:
        state = operation.state
        last = operation.last_state
        return cls(
            name=operation.name,
            group=operation.group_name,
            status=state.status if state else None,
            previous_status=last.status if last else None,
            duration=state.duration if state else 0.0,
            error=str(state.error) if state and state.error is not None else None,
            silent=operation.silent,
        )

    @property
    def changed(self) -> bool:
        """True if the status differs from the previous pass."""
        return self.status != self.previous_status


class ExecutionSummary(BaseModel):
    """Aggregate view of a pass.

    Attributes:
        status: Aggregate status returned by the pass.
        records: Per-operation records, sorted by name.
    """

    status: OperationStatus | None = None
    records: list[OperationRecord] = Field(default_factory=list)

    @classmethod
    def from_operations(
        cls,
        operations: Iterable[Operation],
        status: OperationStatus | None = None,
    ) -> ExecutionSummary:
        records = sorted(
            (OperationRecord.from_operation(op) for op in operations),
            key=lambda r: r.name,
        )
        return cls(status=status, records=records)

    @property
    def failures(self) -> list[OperationRecord]:
        return [r for r in self.records if r.status == OperationStatus.FAILURE]

    def by_status(self, status: OperationStatus) -> list[OperationRecord]:
        return [r for r in self.records if r.status == status]

    def status_counts(self) -> dict[str, int]:
        return dict(Counter(r.status.value if r.status else "UNSET" for r in self.records))

    def __getitem__(self, name: str) -> OperationRecord:
        for record in self.records:
            if record.name == name:
                return record
        raise KeyError(f"No record for operation {name!r}")
