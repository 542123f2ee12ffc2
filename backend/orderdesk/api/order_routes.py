"""
Order API routes.

Endpoints:
  GET       /orders                          – every order line
  GET       /orders/{id}                     – one order line
  POST      /orders                          – insert a batch of new lines
  GET       /orders-by-number/{order_no}     – lines of one order (optional created_at filter)
  POST|PUT  /orders-by-number/{order_no}     – reconcile an order to the submitted lines
  GET       /api/orders/next-order-number    – suggested next SQ-DD-MM-YY-NNNN number
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from loguru import logger
from sqlmodel import Session, select

from orderdesk.core.database import get_session
from orderdesk.core.security import get_current_uid
from orderdesk.exceptions import OrderValidationError
from orderdesk.models.order import OrderLine
from orderdesk.orders.numbering import generate_next_order_number
from orderdesk.orders.reconciler import create_order_lines, get_order_lines, reconcile_order
from orderdesk.schemas.responses import (
    BulkCreateResponse,
    NextOrderNumber,
    OrderLineRead,
    ReconcileFailure,
    ReconcileResponse,
)

order_router = APIRouter(tags=["orders"])


def _validation_response(exc: OrderValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.message, "details": exc.details})


# ── Reads ─────────────────────────────────────────────────────────────────────


@order_router.get("/orders", response_model=list[OrderLineRead])
def list_orders(session: Session = Depends(get_session)):
    return session.exec(select(OrderLine).order_by(OrderLine.id)).all()


@order_router.get("/orders/{order_id}", response_model=OrderLineRead)
def get_order(order_id: int, session: Session = Depends(get_session)):
    line = session.get(OrderLine, order_id)
    if line is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return line


@order_router.get("/orders-by-number/{order_no}", response_model=list[OrderLineRead])
def get_orders_by_number(
    order_no: str,
    created_at: Optional[datetime] = Query(default=None, description="Only lines created at this instant"),
    session: Session = Depends(get_session),
):
    """All lines of one order, ordered by id."""
    rows = get_order_lines(session, order_no, created_at)
    if not rows:
        raise HTTPException(status_code=404, detail="No orders found")
    return rows


@order_router.get("/api/orders/next-order-number", response_model=NextOrderNumber)
def next_order_number(session: Session = Depends(get_session)):
    """Suggest the next order number for today. The number is not reserved."""
    try:
        return NextOrderNumber(orderNumber=generate_next_order_number(session))
    except Exception as exc:
        logger.error(f"Next order number failed: {exc}")
        raise HTTPException(status_code=500, detail=str(exc))


# ── Writes ────────────────────────────────────────────────────────────────────


@order_router.post("/orders", response_model=BulkCreateResponse)
def create_orders(
    payload: Any = Body(default=None),
    session: Session = Depends(get_session),
    uid: str = Depends(get_current_uid),
):
    """Insert every submitted line as a new row, all or nothing."""
    try:
        ids = create_order_lines(session, payload)
    except OrderValidationError as exc:
        return _validation_response(exc)
    except Exception as exc:
        logger.error(f"Bulk order create failed: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    logger.info(f"{uid} inserted {len(ids)} order lines")
    return BulkCreateResponse(
        message="Orders inserted successfully", insertedCount=len(ids), ids=ids
    )


@order_router.api_route("/orders-by-number/{order_no}", methods=["POST", "PUT"])
def reconcile_order_lines(
    order_no: str,
    payload: Any = Body(default=None),
    session: Session = Depends(get_session),
    uid: str = Depends(get_current_uid),
):
    """
    Reconcile an order to the submitted line descriptors.

    Lines with an id are updated, lines without one are inserted, and lines
    with ``_deleted: true`` are removed. Header fields are then made identical
    on every line. All of it happens in one transaction.
    """
    logger.info(f"{uid} reconciling order {order_no}")
    try:
        result = reconcile_order(session, order_no, payload)
    except OrderValidationError as exc:
        return _validation_response(exc)
    except Exception as exc:
        failure = ReconcileFailure(
            message=getattr(exc, "message", None) or str(exc),
            order_no=order_no,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        return JSONResponse(status_code=500, content=failure.model_dump())

    body = ReconcileResponse(
        message=f"Order {result.order_no} updated successfully",
        data=[OrderLineRead.model_validate(row) for row in result.rows],
        operations=result.operations,
        order_details=result.order_details,
    )
    return JSONResponse(
        status_code=201 if result.created else 200,
        content=body.model_dump(mode="json"),
    )
