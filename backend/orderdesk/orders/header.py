"""
Header reconciliation.

Header fields (customer, totals, status …) belong to the whole order but are
stored on every line. One canonical set is resolved per request and, once all
line changes are applied, written to every row of the order in one UPDATE.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Optional

from loguru import logger
from sqlalchemy import update
from sqlmodel import Session

from orderdesk.models.order import OrderLine
from orderdesk.orders.differ import LineDescriptor, OrderBatch
from orderdesk.orders.fields import HEADER_DEFAULTS, HEADER_FIELDS, LINE_DEFAULTS


def header_source(batch: OrderBatch) -> Optional[LineDescriptor]:
    """
    Descriptor the header is read from: the existing line with the lowest id,
    else the first new line. None when the batch only deletes.
    """
    if batch.to_update:
        return batch.to_update[0]
    if batch.to_insert:
        return batch.to_insert[0]
    return None


def resolve_header(batch: OrderBatch, today: Optional[date] = None) -> dict[str, Any]:
    """Canonical header values for the order; missing or null fields use defaults."""
    header = dict(HEADER_DEFAULTS)
    header["order_date"] = today or date.today()

    source = header_source(batch)
    if source is not None:
        for name, value in source.header_values.items():
            if value is not None:
                header[name] = value
    return header


def build_insert_row(order_no: str, header: dict[str, Any], descriptor: LineDescriptor) -> OrderLine:
    """New line = resolved header + the descriptor's line fields over line defaults."""
    line = {**LINE_DEFAULTS, **descriptor.line_values}
    return OrderLine(order_no=order_no, **header, **line)


def broadcast_header(session: Session, order_no: str, header: dict[str, Any]) -> int:
    """Write ``header`` to every row of ``order_no``. Returns the number of rows touched."""
    values = {name: header[name] for name in HEADER_FIELDS}
    result = session.exec(
        update(OrderLine)
        .where(OrderLine.order_no == order_no)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    logger.info(f"Updated common order details for {result.rowcount} rows in order {order_no}")
    return result.rowcount
