# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""OperationExecutionManager - runs a dependency-closed set of operations.

Construction validates the graph (every dependency is in the set, names are
unique, no cycles), groups operations by label and computes priorities.
Each call to execute() is one pass over the whole graph.

Example:
    manager = OperationExecutionManager([lint, compile_, test])
    status = await manager.execute(
        parallelism=4,
        cancellation_token=source.token,
        request_run=watch_loop.request_run,
    )
    if status == OperationStatus.FAILURE:
        for record in manager.summarize().failures:
            ...
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import partial

from opgraph.config import ExecutionConfig
from opgraph.core import CancellationToken, OperationStatus
from opgraph.errors import DuplicateOperationError, MissingDependencyError
from opgraph.utils.concurrency import gather_settled

from .gate import PriorityWorkQueue
from .group import OperationGroupRecord
from .node import ExecuteOperationContext, Operation, RequestRunCallback
from .report import ExecutionSummary
from .state import OperationState
from .topology import calculate_critical_paths

logger = logging.getLogger(__name__)

__all__ = ("OperationExecutionManager",)


class OperationExecutionManager:
    """Execution driver for an operation graph.

    Attributes:
        operations: The operations, in the order given.
        groups: Group records by name.
        total_operations: Count of operations whose runner is not silent.
            A graph with none of them reports NO_OP.
    """

    def __init__(self, operations: Iterable[Operation]) -> None:
        self.operations: list[Operation] = list(dict.fromkeys(operations))
        self.groups: dict[str, OperationGroupRecord] = {}

        members = set(self.operations)
        names: set[str] = set()
        total = 0
        for operation in self.operations:
            if operation.name in names:
                raise DuplicateOperationError(operation.name)
            names.add(operation.name)

            for dependency in operation.dependencies:
                if dependency not in members:
                    raise MissingDependencyError(operation.name, dependency.name)

            if operation.group_name:
                group = self.groups.get(operation.group_name)
                if group is None:
                    group = self.groups[operation.group_name] = OperationGroupRecord(
                        operation.group_name
                    )
                group.add_operation(operation)

            if not operation.silent:
                total += 1

        self.total_operations = total
        calculate_critical_paths(self.operations)

        self._config = ExecutionConfig()
        self._has_failures = False
        self._last_status: OperationStatus | None = None
        self._gate: PriorityWorkQueue | None = None

    @property
    def gate(self) -> PriorityWorkQueue | None:
        """Concurrency gate of the most recent pass."""
        return self._gate

    @property
    def last_status(self) -> OperationStatus | None:
        return self._last_status

    async def execute(
        self,
        *,
        parallelism: int | str | None = None,
        config: ExecutionConfig | None = None,
        cancellation_token: CancellationToken | None = None,
        request_run: RequestRunCallback | None = None,
    ) -> OperationStatus:
        """Run one pass over every operation.

        Args:
            parallelism: Max operations inside the gate at once.
            config: Full configuration; mutually exclusive with parallelism.
            cancellation_token: Checked after dependencies settle and after
                admission to the gate. Defaults to a token that never cancels.
            request_run: Host callback; invoked as (operation_name, detail)
                when a finished operation asks to run again.

        Returns:
            NO_OP if no operation has a non-silent runner, else CANCELLED if
            the token was cancelled, else FAILURE if any operation failed,
            else SUCCESS.
        """
        if config is not None and parallelism is not None:
            raise ValueError("Pass either parallelism or config, not both")
        if config is None:
            config = ExecutionConfig(parallelism=parallelism)
        self._config = config

        token = cancellation_token or CancellationToken.none()

        for group in self.groups.values():
            group.reset()
        for operation in self.operations:
            operation.reset()
        self._has_failures = False

        max_concurrency = max(1, min(self.total_operations, config.max_parallelism))
        logger.debug("Executing a maximum of %d simultaneous operations...", max_concurrency)

        self._gate = PriorityWorkQueue(max_concurrency)
        context = ExecuteOperationContext(
            cancellation_token=token,
            queue_work=self._gate.submit,
            before_execute=self._before_execute,
            after_execute=self._after_execute,
            request_run=request_run,
        )

        results = await gather_settled(partial(op.execute, context) for op in self.operations)
        for result in results:
            if result.rejected:
                raise result.error

        if self.total_operations == 0:
            status = OperationStatus.NO_OP
        elif token.is_cancelled:
            status = OperationStatus.CANCELLED
        elif self._has_failures:
            status = OperationStatus.FAILURE
        else:
            status = OperationStatus.SUCCESS

        self._last_status = status
        return status

    def summarize(self) -> ExecutionSummary:
        """Per-operation records for the most recent pass."""
        return ExecutionSummary.from_operations(self.operations, self._last_status)

    async def _before_execute(self, operation: Operation, state: OperationState) -> None:
        group = self.groups.get(operation.group_name) if operation.group_name else None
        if group is not None and group.start_timer() and self._config.log_group_timings:
            logger.info(" ---- %s started ---- ", group.name)

    async def _after_execute(self, operation: Operation, state: OperationState) -> None:
        if state.status == OperationStatus.FAILURE:
            # Reported even for silent runners
            self._has_failures = True
            logger.error("%s: %s", operation.name, state.error or "failed")

        group = self.groups.get(operation.group_name) if operation.group_name else None
        if group is None or not group.set_operation_as_complete(operation, state):
            return
        if not self._config.log_group_timings:
            return

        if group.has_failures:
            logger.error(
                " ---- %s encountered an error (%.3fs) ---- ", group.name, group.duration
            )
        elif group.has_cancellations:
            logger.info(" ---- %s cancelled (%.3fs) ---- ", group.name, group.duration)
        else:
            logger.info(" ---- %s finished (%.3fs) ---- ", group.name, group.duration)

    def __repr__(self) -> str:
        return (
            f"OperationExecutionManager(operations={len(self.operations)}, "
            f"groups={len(self.groups)}, status={self._last_status})"
        )
