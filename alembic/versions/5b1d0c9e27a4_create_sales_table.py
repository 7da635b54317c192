"""create_sales_table

Revision ID: 5b1d0c9e27a4
Revises:
Create Date: 2026-10-12 09:41:07.512309
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1d0c9e27a4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


LOOKUP_INDEXES = (
    ("ix_sales_customer_name", "customer_name"),
    ("ix_sales_phone_number", "phone_number"),
    ("ix_sales_date", "date"),
    ("ix_sales_customer_region", "customer_region"),
    ("ix_sales_product_category", "product_category"),
    ("ix_sales_payment_method", "payment_method"),
    ("ix_sales_order_status", "order_status"),
    ("ix_sales_delivery_type", "delivery_type"),
)


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_id", sa.String(50)),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("customer_id", sa.String(50)),
        sa.Column("customer_name", sa.String(255)),
        sa.Column("phone_number", sa.String(20)),
        sa.Column("gender", sa.String(10)),
        sa.Column("age", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("customer_region", sa.String(100)),
        sa.Column("customer_type", sa.String(50)),
        sa.Column("product_id", sa.String(50)),
        sa.Column("product_name", sa.String(255)),
        sa.Column("brand", sa.String(100)),
        sa.Column("product_category", sa.String(100)),
        sa.Column("tags", sa.Text()),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("price_per_unit", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("final_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("payment_method", sa.String(50)),
        sa.Column("order_status", sa.String(50)),
        sa.Column("delivery_type", sa.String(50)),
        sa.Column("store_id", sa.String(50)),
        sa.Column("store_location", sa.String(255)),
        sa.Column("salesperson_id", sa.String(50)),
        sa.Column("employee_name", sa.String(255)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    op.create_index("ix_sales_id", "sales", ["id"], unique=False)

    for name, column in LOOKUP_INDEXES:
        op.create_index(name, "sales", [column], unique=False)


def downgrade() -> None:
    """Downgrade schema."""

    for name, _ in reversed(LOOKUP_INDEXES):
        op.drop_index(name, table_name="sales")

    op.drop_index("ix_sales_id", table_name="sales")
    op.drop_table("sales")
