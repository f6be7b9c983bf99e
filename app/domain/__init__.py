"""
app/domain package marker.
"""

from app.domain.deduplication import DedupOutcome
from app.domain.product import MANUAL_COPY_MEMO, IdentityKey, ProductRecord, ProductRef, RawProduct
from app.domain.product_scraping import ItemResult, RunMode, RunState, ScrapeResult
from app.domain.restore import BatchExecutionResult, ExecutionTier

__all__ = [
    "BatchExecutionResult",
    "DedupOutcome",
    "ExecutionTier",
    "IdentityKey",
    "ItemResult",
    "MANUAL_COPY_MEMO",
    "ProductRecord",
    "ProductRef",
    "RawProduct",
    "RunMode",
    "RunState",
    "ScrapeResult",
]
