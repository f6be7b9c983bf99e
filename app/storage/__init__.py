"""
Storage layer exports.
"""

from app.storage.base import DeleteResult, ProductFilter, ProductStore, SortOrder
from app.storage.sqlalchemy_storage import SQLAlchemyProductStore

__all__ = [
    "DeleteResult",
    "ProductFilter",
    "ProductStore",
    "SQLAlchemyProductStore",
    "SortOrder",
]
