"""SQLModel model for the stock item master."""
from typing import Optional
from sqlmodel import SQLModel, Field


class StockItem(SQLModel, table=True):
    """Sellable item; order lines copy its code, name, HSN and GST rate."""

    __tablename__ = "stock_item"

    item_code: str = Field(primary_key=True)
    item_name: str = Field(index=True)
    hsn: Optional[str] = None
    gst: Optional[float] = None
    uom: Optional[str] = None
    rate: Optional[float] = None
