"""create products table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_type", sa.String(length=32), nullable=False, comment="official, rakuten, yahoo"),
        sa.Column(
            "source_name",
            sa.String(length=255),
            nullable=False,
            comment="Shop or brand label within the source",
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=True),
        sa.Column("sale_price", sa.Integer(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("asin", sa.String(length=20), nullable=True, comment="External marketplace identifier"),
        sa.Column("is_hidden", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_favorite", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column(
            "original_product_id",
            postgresql.UUID(as_uuid=True),
            nullable=True,
            comment="Set on manual copies; points at the root original",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_products"),
    )
    op.create_index(
        "ix_products_identity",
        "products",
        ["source_type", "source_name", "name", "asin"],
        unique=False,
    )
    op.create_index("ix_products_source_name", "products", ["source_name"], unique=False)
    op.create_index("ix_products_created_at", "products", ["created_at"], unique=False)
    op.create_index("ix_products_is_favorite", "products", ["is_favorite"], unique=False)
    op.create_index("ix_products_original_product_id", "products", ["original_product_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_products_original_product_id", table_name="products")
    op.drop_index("ix_products_is_favorite", table_name="products")
    op.drop_index("ix_products_created_at", table_name="products")
    op.drop_index("ix_products_source_name", table_name="products")
    op.drop_index("ix_products_identity", table_name="products")
    op.drop_table("products")
