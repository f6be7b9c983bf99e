"""
db/models/product.py

Product listing row shared by all scraped sources.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Index, Integer, String, Text, false
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class SourceType:
    OFFICIAL = "official"
    RAKUTEN = "rakuten"
    YAHOO = "yahoo"


class Product(TimestampMixin, Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    source_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="official, rakuten, yahoo",
    )
    source_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Shop or brand label within the source",
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sale_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    asin: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="External marketplace identifier",
    )
    is_hidden: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    is_favorite: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_product_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
        comment="Set on manual copies; points at the root original",
    )

    __table_args__ = (
        Index("ix_products_identity", "source_type", "source_name", "name", "asin"),
        Index("ix_products_source_name", "source_name"),
        Index("ix_products_created_at", "created_at"),
        Index("ix_products_is_favorite", "is_favorite"),
        Index("ix_products_original_product_id", "original_product_id"),
    )
