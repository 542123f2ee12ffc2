"""
Health, master-data and caller-identity routes.

Endpoints:
  GET  /api/health
  GET  /api/health/db
  GET  /stock_item
  GET  /customer
  GET  /admins
  GET  /distributors
  GET  /corporates
  GET  /me-admin
  GET  /me-distributor
  GET  /me-corporate
"""
from __future__ import annotations

import os
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import literal_column
from sqlmodel import Session, select

from orderdesk.core.database import get_session
from orderdesk.core.security import get_current_uid
from orderdesk.models.people import Admin, Customer
from orderdesk.models.stock import StockItem
from orderdesk.schemas.responses import (
    AdminRole,
    CustomerIdentity,
    CustomerRead,
    DbHealthResponse,
    HealthResponse,
)

router = APIRouter(prefix="/api", tags=["health"])
master_router = APIRouter(tags=["master"])


# ── Health ────────────────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        status="OK",
        message="Backend is running successfully",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=os.getenv("ENVIRONMENT", "development"),
    )


@router.get("/health/db", response_model=DbHealthResponse)
def health_db(session: Session = Depends(get_session)):
    try:
        value = session.exec(select(literal_column("1"))).first()
    except Exception as exc:
        logger.error(f"Database health check failed: {exc}")
        return JSONResponse(
            status_code=500,
            content=DbHealthResponse(
                status="ERROR", database="Connection failed", error=str(exc)
            ).model_dump(),
        )
    return DbHealthResponse(status="OK", database="Connected successfully", test=int(value))


# ── Master data ───────────────────────────────────────────────────────────────


@master_router.get("/stock_item", response_model=list[StockItem])
def list_stock_items(session: Session = Depends(get_session)):
    return session.exec(select(StockItem).order_by(StockItem.item_code)).all()


@master_router.get("/customer", response_model=list[CustomerRead])
def list_customers(session: Session = Depends(get_session)):
    return session.exec(select(Customer).order_by(Customer.customer_code)).all()


@master_router.get("/admins", response_model=list[Admin])
def list_admins(session: Session = Depends(get_session)):
    return session.exec(select(Admin).order_by(Admin.id)).all()


@master_router.get("/distributors", response_model=list[CustomerRead])
def list_distributors(session: Session = Depends(get_session)):
    return session.exec(
        select(Customer)
        .where(Customer.customer_type == "distributor")
        .order_by(Customer.customer_code)
    ).all()


@master_router.get("/corporates", response_model=list[CustomerRead])
def list_corporates(session: Session = Depends(get_session)):
    return session.exec(
        select(Customer)
        .where(Customer.customer_type == "direct")
        .order_by(Customer.customer_code)
    ).all()


# ── Caller identity ───────────────────────────────────────────────────────────


@master_router.get("/me-admin", response_model=list[AdminRole])
def me_admin(
    uid: str = Depends(get_current_uid),
    session: Session = Depends(get_session),
):
    """Role of the calling admin (empty list when the caller is not an admin)."""
    return session.exec(select(Admin).where(Admin.firebase_uid == uid)).all()


def _customer_identity(session: Session, uid: str) -> list[Customer]:
    return list(session.exec(select(Customer).where(Customer.firebase_uid == uid)).all())


@master_router.get("/me-distributor", response_model=list[CustomerIdentity])
def me_distributor(
    uid: str = Depends(get_current_uid),
    session: Session = Depends(get_session),
):
    return _customer_identity(session, uid)


@master_router.get("/me-corporate", response_model=list[CustomerIdentity])
def me_corporate(
    uid: str = Depends(get_current_uid),
    session: Session = Depends(get_session),
):
    return _customer_identity(session, uid)
