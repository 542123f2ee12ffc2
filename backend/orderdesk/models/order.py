"""SQLModel model for order lines (one row per item; header fields repeat on every row)."""
from typing import Optional
from datetime import date, datetime, timezone
from sqlmodel import SQLModel, Field


class OrderLine(SQLModel, table=True):
    """
    A single line item of a sales order.

    Lines sharing ``order_no`` form one logical order. The header block below
    is physically duplicated on each line and kept identical by the header
    broadcast in ``orderdesk.orders.header``.
    """

    __tablename__ = "orders"
    # never hand a deleted line's id to a new line
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    order_no: str = Field(index=True)

    # Header (same value on every line of an order)
    voucher_type: str = Field(default="Sales Order")
    order_date: Optional[date] = Field(default=None, index=True)
    customer_code: str = Field(default="", index=True)
    customer_name: str = Field(default="")
    executive: str = Field(default="")
    role: str = Field(default="")
    status: str = Field(default="pending", index=True)
    total_quantity: float = Field(default=0.0)
    total_amount: float = Field(default=0.0)
    total_amount_without_tax: float = Field(default=0.0)
    total_sgst_amount: float = Field(default=0.0)
    total_cgst_amount: float = Field(default=0.0)
    total_igst_amount: float = Field(default=0.0)
    remarks: str = Field(default="")

    # Line
    item_code: str = Field(default="", index=True)
    item_name: str = Field(default="")
    hsn: str = Field(default="")
    gst: float = Field(default=0.0)   # rate in %, e.g. 18
    sgst: float = Field(default=0.0)
    cgst: float = Field(default=0.0)
    igst: float = Field(default=0.0)
    quantity: float = Field(default=0.0)
    uom: str = Field(default="")
    rate: float = Field(default=0.0)
    amount: float = Field(default=0.0)
    net_rate: float = Field(default=0.0)
    gross_amount: float = Field(default=0.0)
    disc_percentage: float = Field(default=0.0)
    disc_amount: float = Field(default=0.0)
    spl_disc_percentage: float = Field(default=0.0)
    spl_disc_amount: float = Field(default=0.0)
    delivery_date: Optional[date] = None
    delivery_mode: str = Field(default="")
    transporter_name: str = Field(default="")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
