"""Create products table

Revision ID: 3c1f6a2b9d40
Revises:
Create Date: 2026-10-19 10:02:11.412937

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3c1f6a2b9d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "products",
        sa.Column("sku", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("in_stock", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("category_url_key", sa.String(length=120), nullable=True),
        sa.Column("manufacturer", sa.String(length=100), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_products_category_url_key", "products", ["category_url_key"])
    op.create_index("ix_products_manufacturer", "products", ["manufacturer"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_products_manufacturer", table_name="products")
    op.drop_index("ix_products_category_url_key", table_name="products")
    op.drop_table("products")
