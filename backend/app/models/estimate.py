"""BizDesk - Sales estimate model."""
import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, Enum, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin
from app.resources import api_resource

JsonType = JSON().with_variant(JSONB(), "postgresql")

ESTIMATE_STATUSES = ("DRAFT", "SENT", "ACCEPTED", "REJECTED", "EXPIRED", "INVOICED")
CHANNELS = ("Online", "Offline")

_TOTALS = (
    "subtotal", "total_cost", "taxable_amount", "total_tax", "shipping_charges",
    "other_charges", "adjustment", "round_off", "grand_total",
)


def _amount() -> Mapped[Decimal]:
    return mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0"))


@api_resource()
class Estimate(TimestampMixin, Base):
    __tablename__ = "estimates"
    __table_args__ = (Index("ix_estimates_status_date", "status", "date"),)

    __fillable__ = (
        "type", "number", "date", "validity", "status", "active", "reference",
        "customer_id", "salesperson", "branch_id", "channel", "tax_inclusive",
        "show_bank_details", "bank_id", "show_signature", "show_upi_qr",
        "customer_billing", "customer_shipping", "items", *_TOTALS,
        "terms", "notes", "created_by", "updated_by",
    )
    # Identifiers are free-form strings, not numeric keys
    __casts__ = {
        "number": "string",
        "customer_id": "string",
        "branch_id": "string",
        "bank_id": "string",
        **{name: "float" for name in _TOTALS},
    }
    __required__ = ("number", "date", "customer_id")
    __searchable__ = ("number", "customer_id", "salesperson")
    __index_columns__ = {
        "number": {"label": "Estimate Number", "sortable": True, "clickable": True, "search": True},
        "date": {"label": "Date", "sortable": True, "format": "date"},
        "customer_id": {"label": "Customer", "sortable": True, "search": True},
        "status": {"label": "Status", "sortable": True, "search": True},
        "salesperson": {"label": "Salesperson", "sortable": True, "search": True},
        "grand_total": {"label": "Total Amount", "sortable": True, "format": "currency", "align": "right"},
    }
    __api_filters__ = {
        "status": {"label": "Status", "values": list(ESTIMATE_STATUSES)},
        "channel": {"label": "Channel", "values": list(CHANNELS)},
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="ESTIMATE")
    number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    validity: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    status: Mapped[str] = mapped_column(
        Enum(*ESTIMATE_STATUSES, name="estimate_status_enum", native_enum=False),
        nullable=False, default="DRAFT",
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    salesperson: Mapped[str | None] = mapped_column(String(255), nullable=True)
    branch_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    channel: Mapped[str | None] = mapped_column(
        Enum(*CHANNELS, name="estimate_channel_enum", native_enum=False), nullable=True
    )

    # Document options
    tax_inclusive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    show_bank_details: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    bank_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    show_signature: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_upi_qr: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    customer_billing: Mapped[dict | None] = mapped_column(JsonType, nullable=True)
    customer_shipping: Mapped[dict | None] = mapped_column(JsonType, nullable=True)
    items: Mapped[list | None] = mapped_column(JsonType, nullable=True)

    subtotal: Mapped[Decimal] = _amount()
    total_cost: Mapped[Decimal] = _amount()
    taxable_amount: Mapped[Decimal] = _amount()
    total_tax: Mapped[Decimal] = _amount()
    shipping_charges: Mapped[Decimal] = _amount()
    other_charges: Mapped[Decimal] = _amount()
    adjustment: Mapped[Decimal] = _amount()
    round_off: Mapped[Decimal] = _amount()
    grand_total: Mapped[Decimal] = _amount()

    terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
