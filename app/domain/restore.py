"""
app/domain/restore.py

Domain models for tiered batch restores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class ExecutionTier(IntEnum):
    BULK = 1
    BATCHED = 2
    SINGLE = 3


@dataclass(frozen=True)
class BatchExecutionResult:
    """
    Outcome of one tiered execution.

    `errors` only lists items that failed at every tier they went through;
    tier-level fallbacks are reported in `degradations`.
    """

    total_items: int
    inserted_count: int
    tier: ExecutionTier
    errors: list[str] = field(default_factory=list)
    degradations: list[str] = field(default_factory=list)
