"""Pydantic response schemas for API endpoints."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: str
    environment: str
    version: str = "1.0.0"


class DbHealthResponse(BaseModel):
    status: str
    database: str
    test: Optional[int] = None
    error: Optional[str] = None


class OrderLineRead(BaseModel):
    id: int
    order_no: str

    voucher_type: str
    order_date: Optional[date]
    customer_code: str
    customer_name: str
    executive: str
    role: str
    status: str
    total_quantity: float
    total_amount: float
    total_amount_without_tax: float
    total_sgst_amount: float
    total_cgst_amount: float
    total_igst_amount: float
    remarks: str

    item_code: str
    item_name: str
    hsn: str
    gst: float
    sgst: float
    cgst: float
    igst: float
    quantity: float
    uom: str
    rate: float
    amount: float
    net_rate: float
    gross_amount: float
    disc_percentage: float
    disc_amount: float
    spl_disc_percentage: float
    spl_disc_amount: float
    delivery_date: Optional[date]
    delivery_mode: str
    transporter_name: str

    created_at: datetime

    class Config:
        from_attributes = True


class OrderOperations(BaseModel):
    inserted: int
    updated: int
    deleted: int
    total: int


class OrderDetails(BaseModel):
    order_no: str
    customer_name: str
    total_amount: float
    status: str


class ReconcileResponse(BaseModel):
    success: bool = True
    message: str
    data: list[OrderLineRead]
    operations: OrderOperations
    order_details: OrderDetails


class ReconcileFailure(BaseModel):
    success: bool = False
    error: str = "Database operation failed"
    message: str
    order_no: str
    timestamp: str


class BulkCreateResponse(BaseModel):
    message: str
    insertedCount: int
    ids: list[int]


class NextOrderNumber(BaseModel):
    orderNumber: str


class AdminRole(BaseModel):
    role: str

    class Config:
        from_attributes = True


class CustomerIdentity(BaseModel):
    customer_code: str
    customer_name: str
    role: Optional[str]
    state: Optional[str]

    class Config:
        from_attributes = True


class CustomerRead(BaseModel):
    customer_code: str
    customer_name: str
    mobile_number: Optional[str]
    email: Optional[str]
    customer_type: str
    role: Optional[str]
    status: Optional[str]
    state: Optional[str]

    class Config:
        from_attributes = True
