"""BizDesk - Product catalogue model."""
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Enum, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin
from app.resources import api_resource

JsonType = JSON().with_variant(JSONB(), "postgresql")

PRODUCT_TYPES = ("simple", "variable", "grouped", "external")
PUBLICATION_STATUSES = ("draft", "published", "discontinued", "private")
UNITS = ("nos", "piece", "kg", "gram", "liter", "meter")


def _money(label: str, required: bool = False) -> dict:
    return {
        "label": label,
        "placeholder": "0.00",
        "required": required,
        "default": "0.00",
        "min": "0",
        "step": "0.01",
        "prefix": "₹",
    }


def _checkbox(label: str, default: bool) -> dict:
    return {"type": "checkbox", "label": label, "required": False, "default": default}


def _options(values: tuple[str, ...]) -> list[dict]:
    return [{"value": v, "label": v.replace("_", " ").title()} for v in values]


@api_resource(uri="products")
class Product(TimestampMixin, Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_publication_status_active", "publication_status", "active"),
    )

    __fillable__ = (
        "name", "slug", "type", "publication_status", "active", "description",
        "short_description", "sku", "barcode", "brand", "cost", "mrp", "price",
        "sale_price", "taxable", "tax_hsn_code", "tax_rate", "tax_inclusive",
        "stock_track", "stock_quantity", "stock_low_threshold", "length", "width",
        "height", "weight", "unit", "shipping_weight", "shipping_required",
        "shipping_taxable", "shipping_class_id", "image", "images", "external_url",
        "categories", "tags", "attributes", "variations", "meta_data", "related_ids",
        "upsell_ids", "cross_sell_ids",
    )
    __required__ = ("name", "slug")
    __searchable__ = ("name", "slug", "sku")
    __index_columns__ = {
        "name": {"label": "Product Name", "sortable": True, "clickable": True, "search": True},
        "cost": {"label": "Cost", "formatter": "currency"},
        "price": {"label": "Price", "sortable": True, "formatter": "currency"},
        "mrp": {"label": "MRP", "formatter": "currency"},
        "stock_quantity": {"label": "Stock", "sortable": True, "formatter": "number"},
    }
    __api_filters__ = {
        "type": {"label": "Type", "values": list(PRODUCT_TYPES)},
        "publication_status": {"label": "Status", "values": list(PUBLICATION_STATUSES)},
    }
    __api_schema__ = [
        {
            "group": "General Information",
            "fields": {
                "active": _checkbox("Active", True),
                "name": {"label": "Product Name", "placeholder": "Enter product name", "required": True, "maxLength": 255},
                "slug": {"label": "URL Slug", "placeholder": "auto-generated-from-name", "required": True, "maxLength": 255},
                "type": {"type": "select", "label": "Product Type", "options": _options(PRODUCT_TYPES), "required": True, "default": "simple"},
                "publication_status": {"type": "select", "label": "Publication Status", "options": _options(PUBLICATION_STATUSES), "required": True, "default": "draft"},
                "sku": {"label": "SKU", "placeholder": "Enter SKU code", "required": False, "maxLength": 100},
                "barcode": {"label": "Barcode", "placeholder": "Enter barcode", "required": False, "maxLength": 100},
                "brand": {"label": "Brand", "placeholder": "Enter brand name", "required": False, "default": "ASENSAR"},
                "unit": {"type": "select", "label": "Unit", "options": _options(UNITS), "required": False, "default": "nos"},
                "categories": {"type": "multiselect", "label": "Categories", "required": False, "options": []},
                "image": {"type": "file", "label": "Featured Image", "required": False, "accept": "image/*"},
                "external_url": {"label": "External URL", "placeholder": "https://example.com", "required": False, "maxLength": 500},
            },
        },
        {
            "group": "Price & Inventory",
            "fields": {
                "cost": _money("Cost Price"),
                "mrp": _money("MRP"),
                "price": _money("Regular Price"),
                "sale_price": _money("Sale Price"),
                "stock_track": _checkbox("Track Stock", False),
                "stock_quantity": {"type": "number", "label": "Stock Quantity", "placeholder": "0", "required": False, "default": "0", "min": "0", "step": "1"},
                "stock_low_threshold": {"type": "number", "label": "Low Stock Threshold", "placeholder": "5", "required": False, "default": "0", "min": "0", "step": "1"},
            },
        },
        {
            "group": "TAX",
            "fields": {
                "taxable": _checkbox("Taxable", True),
                "tax_hsn_code": {"label": "HSN Code", "placeholder": "Enter HSN code", "required": False, "maxLength": 20},
                "tax_rate": {"type": "number", "label": "Tax Rate (%)", "placeholder": "18.00", "required": False, "default": "18.00", "min": "0", "max": "100", "step": "0.01", "suffix": "%"},
                "tax_inclusive": _checkbox("Tax Inclusive", True),
            },
        },
        {
            "group": "Shipping",
            "fields": {
                "shipping_required": _checkbox("Requires Shipping", True),
                "shipping_taxable": _checkbox("Shipping Taxable", True),
                "shipping_weight": {"type": "number", "label": "Shipping Weight", "required": False, "min": "0", "step": "0.01", "suffix": "kg"},
                "length": {"type": "number", "label": "Length", "required": False, "min": "0", "step": "0.01", "suffix": "cm"},
                "width": {"type": "number", "label": "Width", "required": False, "min": "0", "step": "0.01", "suffix": "cm"},
                "height": {"type": "number", "label": "Height", "required": False, "min": "0", "step": "0.01", "suffix": "cm"},
                "weight": {"type": "number", "label": "Weight", "required": False, "min": "0", "step": "0.01", "suffix": "kg"},
            },
        },
        {
            "group": "Description",
            "fields": {
                "short_description": {"type": "textarea", "label": "Short Description", "required": False},
                "description": {"type": "textarea", "label": "Description", "required": False},
            },
        },
    ]

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    type: Mapped[str] = mapped_column(
        Enum(*PRODUCT_TYPES, name="product_type_enum", native_enum=False),
        nullable=False, default="simple", index=True,
    )
    publication_status: Mapped[str] = mapped_column(
        Enum(*PUBLICATION_STATUSES, name="product_publication_status_enum", native_enum=False),
        nullable=False, default="draft",
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    short_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sku: Mapped[str | None] = mapped_column(String(100), unique=True, nullable=True)
    barcode: Mapped[str | None] = mapped_column(String(100), nullable=True)
    brand: Mapped[str] = mapped_column(String(255), nullable=False, default="ASENSAR", index=True)
    cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    mrp: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"), index=True)
    sale_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    taxable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # GST
    tax_hsn_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("18"))
    tax_inclusive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Stock
    stock_track: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stock_low_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Dimensions
    length: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    width: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    height: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="nos")

    # Shipping
    shipping_weight: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    shipping_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    shipping_taxable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    shipping_class_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Media
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    images: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    external_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relations kept as JSON arrays
    categories: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    tags: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    attributes: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    variations: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    meta_data: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    related_ids: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    upsell_ids: Mapped[list | None] = mapped_column(JsonType, nullable=True)
    cross_sell_ids: Mapped[list | None] = mapped_column(JsonType, nullable=True)

