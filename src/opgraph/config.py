# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Execution configuration.

Parallelism may be given as a count, as ``"max"`` (one slot per core), or as
a percentage of cores such as ``"50%"``. ``None`` means one slot per core.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ("ExecutionConfig", "parse_parallelism")


def parse_parallelism(value: int | str | None, cpu_count: int | None = None) -> int:
    """Resolve a parallelism setting to a positive slot count.

    Args:
        value: Count, ``"max"``, ``"NN%"``, numeric string, or None.
        cpu_count: Core count to resolve against. Defaults to os.cpu_count().

    Returns:
        Number of slots, at least 1.

    Raises:
        ValueError: For percentages outside (0, 100], non-numeric strings,
            or counts below 1.
    """
    cores = cpu_count or os.cpu_count() or 1

    if value is None:
        return cores

    if isinstance(value, bool):
        raise ValueError(f"Invalid parallelism value {value!r}")

    if isinstance(value, int):
        if value < 1:
            raise ValueError(f"Parallelism must be at least 1, got {value}")
        return value

    text = value.strip().lower()
    if text == "max":
        return cores

    if text.endswith("%"):
        try:
            percentage = float(text[:-1])
        except ValueError:
            raise ValueError(
                f"Invalid percentage value of {value!r}, expected a number followed by '%'"
            ) from None
        if percentage <= 0 or percentage > 100:
            raise ValueError(
                f"Invalid percentage value of {value!r}, "
                "value cannot be less than '0%' or more than '100%'"
            )
        return max(int(percentage / 100 * cores), 1)

    try:
        count = int(text)
    except ValueError:
        raise ValueError(
            f"Invalid parallelism value of {value!r}, expected a number, a percentage, or 'max'"
        ) from None
    return max(count, 1)


class ExecutionConfig(BaseModel):
    """Settings for one execution pass.

    Attributes:
        parallelism: Slot count, "max", "NN%", or None for one per core.
        log_group_timings: Log group start/finish lines.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    parallelism: int | str | None = Field(
        default=None,
        description="Max operations inside the gate at once.",
    )
    log_group_timings: bool = Field(
        default=True,
        description="Log ' ---- group started/finished ---- ' lines.",
    )

    @field_validator("parallelism")
    @classmethod
    def _validate_parallelism(cls, v: int | str | None) -> int | str | None:
        parse_parallelism(v)
        return v

    @property
    def max_parallelism(self) -> int:
        return parse_parallelism(self.parallelism)
