"""
app/domain/deduplication.py

Domain models for maintenance deduplication.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DedupOutcome:
    """
    Summary of one maintenance dedup pass.

    `completed` is false only when the records could not be loaded at all.
    """

    deleted_count: int
    groups_processed: int
    errors: list[str] = field(default_factory=list)
    completed: bool = True
