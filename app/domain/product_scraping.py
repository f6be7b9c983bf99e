"""
app/domain/product_scraping.py

Domain models for product scraping runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RunMode(str, Enum):
    FULL_CATALOG = "full_catalog"
    TARGETED = "targeted"


class RunState(str, Enum):
    IDLE = "idle"
    LIST_DISCOVERY = "list_discovery"
    DETAIL_FETCH = "detail_fetch"
    NORMALIZE = "normalize"
    PERSIST = "persist"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ItemResult:
    """
    Outcome for one item of a targeted run.
    """

    item_id: str
    name: str
    success: bool
    error: str | None = None
    updated_fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class ScrapeResult:
    """
    Aggregate outcome of one orchestrator run.

    `saved_count + skipped_count` never exceeds `total_found`; items that fail
    before normalization only contribute to `errors`.
    """

    source: str
    mode: RunMode
    success: bool = False
    total_found: int = 0
    saved_count: int = 0
    skipped_count: int = 0
    updated_count: int = 0
    failed_count: int = 0
    proxy_used: bool = False
    errors: list[str] = field(default_factory=list)
    results: list[ItemResult] = field(default_factory=list)
