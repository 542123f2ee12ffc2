"""SQLModel models for the people who use the order desk (admins and customers)."""
from typing import Optional
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class Admin(SQLModel, table=True):
    """Back-office user, linked to the identity provider by ``firebase_uid``."""

    __tablename__ = "admins"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str
    email: str = Field(index=True, unique=True)
    mobile_number: Optional[str] = None
    role: str = Field(default="admin")
    firebase_uid: Optional[str] = Field(default=None, index=True, unique=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Customer(SQLModel, table=True):
    """A distributor or a direct (corporate) customer."""

    __tablename__ = "customer"

    customer_code: str = Field(primary_key=True)
    customer_name: str = Field(index=True)
    mobile_number: Optional[str] = None
    email: Optional[str] = None
    # "distributor" or "direct"
    customer_type: str = Field(default="distributor", index=True)
    password: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    state: Optional[str] = None
    firebase_uid: Optional[str] = Field(default=None, index=True)
