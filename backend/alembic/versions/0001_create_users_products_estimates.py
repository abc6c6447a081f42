"""create users, products, estimates (core schema)

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _money(name: str, precision: int = 10) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision, 2), nullable=False, server_default="0")


def upgrade() -> None:
    # users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("username", sa.String(255), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("whatsapp", sa.String(15), nullable=True, unique=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column(
            "role",
            sa.Enum("admin", "user", name="user_role_enum", native_enum=False),
            nullable=False,
            server_default="user",
        ),
        sa.Column("password", sa.String(255), nullable=False),
        *_timestamps(),
    )

    # products table
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column(
            "type",
            sa.Enum("simple", "variable", "grouped", "external", name="product_type_enum", native_enum=False),
            nullable=False,
            server_default="simple",
        ),
        sa.Column(
            "publication_status",
            sa.Enum(
                "draft", "published", "discontinued", "private",
                name="product_publication_status_enum", native_enum=False,
            ),
            nullable=False,
            server_default="draft",
        ),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("short_description", sa.Text(), nullable=True),
        sa.Column("sku", sa.String(100), nullable=True, unique=True),
        sa.Column("barcode", sa.String(100), nullable=True),
        sa.Column("brand", sa.String(255), nullable=False, server_default="ASENSAR"),
        _money("cost"),
        _money("mrp"),
        _money("price"),
        _money("sale_price"),
        sa.Column("taxable", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("tax_hsn_code", sa.String(20), nullable=True),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False, server_default="18"),
        sa.Column("tax_inclusive", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("stock_track", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("stock_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("stock_low_threshold", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("length", sa.Numeric(8, 2), nullable=True),
        sa.Column("width", sa.Numeric(8, 2), nullable=True),
        sa.Column("height", sa.Numeric(8, 2), nullable=True),
        sa.Column("weight", sa.Numeric(8, 2), nullable=True),
        sa.Column("unit", sa.String(20), nullable=False, server_default="nos"),
        sa.Column("shipping_weight", sa.Numeric(8, 2), nullable=True),
        sa.Column("shipping_required", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("shipping_taxable", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("shipping_class_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("images", JSONB(), nullable=True),
        sa.Column("external_url", sa.String(500), nullable=True),
        sa.Column("categories", JSONB(), nullable=True),
        sa.Column("tags", JSONB(), nullable=True),
        sa.Column("attributes", JSONB(), nullable=True),
        sa.Column("variations", JSONB(), nullable=True),
        sa.Column("meta_data", JSONB(), nullable=True),
        sa.Column("related_ids", JSONB(), nullable=True),
        sa.Column("upsell_ids", JSONB(), nullable=True),
        sa.Column("cross_sell_ids", JSONB(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_products_type", "products", ["type"])
    op.create_index("ix_products_brand", "products", ["brand"])
    op.create_index("ix_products_price", "products", ["price"])
    op.create_index("ix_products_publication_status_active", "products", ["publication_status", "active"])

    # estimates table
    op.create_table(
        "estimates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(50), nullable=False, server_default="ESTIMATE"),
        sa.Column("number", sa.String(100), nullable=False, unique=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("validity", sa.Integer(), nullable=False, server_default="5"),
        sa.Column(
            "status",
            sa.Enum(
                "DRAFT", "SENT", "ACCEPTED", "REJECTED", "EXPIRED", "INVOICED",
                name="estimate_status_enum", native_enum=False,
            ),
            nullable=False,
            server_default="DRAFT",
        ),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("customer_id", sa.String(100), nullable=False),
        sa.Column("salesperson", sa.String(255), nullable=True),
        sa.Column("branch_id", sa.String(100), nullable=True),
        sa.Column(
            "channel",
            sa.Enum("Online", "Offline", name="estimate_channel_enum", native_enum=False),
            nullable=True,
        ),
        sa.Column("tax_inclusive", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("show_bank_details", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("bank_id", sa.String(100), nullable=True),
        sa.Column("show_signature", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("show_upi_qr", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("customer_billing", JSONB(), nullable=True),
        sa.Column("customer_shipping", JSONB(), nullable=True),
        sa.Column("items", JSONB(), nullable=True),
        _money("subtotal", 15),
        _money("total_cost", 15),
        _money("taxable_amount", 15),
        _money("total_tax", 15),
        _money("shipping_charges", 15),
        _money("other_charges", 15),
        _money("adjustment", 15),
        _money("round_off", 15),
        _money("grand_total", 15),
        sa.Column("terms", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("updated_by", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_estimates_customer_id", "estimates", ["customer_id"])
    op.create_index("ix_estimates_status_date", "estimates", ["status", "date"])


def downgrade() -> None:
    op.drop_index("ix_estimates_status_date", table_name="estimates")
    op.drop_index("ix_estimates_customer_id", table_name="estimates")
    op.drop_table("estimates")
    op.drop_index("ix_products_publication_status_active", table_name="products")
    op.drop_index("ix_products_price", table_name="products")
    op.drop_index("ix_products_brand", table_name="products")
    op.drop_index("ix_products_type", table_name="products")
    op.drop_table("products")
    op.drop_table("users")
