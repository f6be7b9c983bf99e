"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.product import Product, SourceType

__all__ = [
    "Product",
    "SourceType",
]
