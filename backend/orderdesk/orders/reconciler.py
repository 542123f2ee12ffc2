"""
Order reconciliation transaction.

Applies a classified batch to the ``orders`` table inside one transaction:

  1. existence check     – rows for the order number (locked where supported)
  2. ownership check     – every referenced id exists and belongs to the order
  3. resolve header
  4. delete              – one DELETE … WHERE id IN (…) AND order_no = ?
  5. update              – ascending id, allowlisted fields only
  6. insert              – resolved header + line fields
  7. header broadcast    – one UPDATE over every surviving row
  8. commit, then re-read the order

Any failure rolls the whole batch back; nothing partial is ever committed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional

from loguru import logger
from sqlalchemy import delete, update
from sqlmodel import Session, col, select

from orderdesk.exceptions import (
    OrderNotFoundError,
    OrderValidationError,
    ZeroRowsAffectedError,
)
from orderdesk.models.order import OrderLine
from orderdesk.orders.differ import OrderBatch, classify, verify_ownership
from orderdesk.orders.fields import (
    FIELD_PARSERS,
    HEADER_DEFAULTS,
    LINE_DEFAULTS,
    FieldParseError,
    parse_fields,
)
from orderdesk.orders.header import broadcast_header, build_insert_row, resolve_header


@dataclass
class ReconcileResult:
    order_no: str
    rows: list[OrderLine]
    header: dict[str, Any]
    created: bool = False
    inserted_ids: list[int] = field(default_factory=list)
    updated_ids: list[int] = field(default_factory=list)
    deleted_ids: list[int] = field(default_factory=list)
    skipped_ids: list[int] = field(default_factory=list)

    @property
    def operations(self) -> dict[str, int]:
        return {
            "inserted": len(self.inserted_ids),
            "updated": len(self.updated_ids),
            "deleted": len(self.deleted_ids),
            "total": len(self.rows),
        }

    @property
    def order_details(self) -> dict[str, Any]:
        return {
            "order_no": self.order_no,
            "customer_name": self.header["customer_name"],
            "total_amount": self.header["total_amount"],
            "status": self.header["status"],
        }


# ── Phases ────────────────────────────────────────────────────────────────────


def _order_exists(session: Session, order_no: str) -> bool:
    first = session.exec(
        select(OrderLine.id)
        .where(OrderLine.order_no == order_no)
        .with_for_update()
    ).first()
    return first is not None


def _delete_lines(session: Session, batch: OrderBatch) -> list[int]:
    ids = [d.id for d in batch.to_delete]
    if not ids:
        return []
    result = session.exec(
        delete(OrderLine)
        .where(col(OrderLine.id).in_(ids), OrderLine.order_no == batch.order_no)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != len(ids):
        raise ZeroRowsAffectedError(
            f"Expected to delete {len(ids)} items from order {batch.order_no}, deleted {result.rowcount}"
        )
    logger.info(f"Deleted {len(ids)} items from {batch.order_no}: {ids}")
    return ids


def _update_lines(session: Session, batch: OrderBatch) -> tuple[list[int], list[int]]:
    updated: list[int] = []
    skipped: list[int] = []
    for descriptor in batch.to_update:
        values = descriptor.update_values
        if not values:
            logger.warning(
                f"Skipping update {descriptor.index} for ID {descriptor.id}: No valid fields"
            )
            skipped.append(descriptor.id)
            continue

        result = session.exec(
            update(OrderLine)
            .where(OrderLine.id == descriptor.id, OrderLine.order_no == batch.order_no)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ZeroRowsAffectedError(
                f"No record found for id {descriptor.id} in order {batch.order_no}"
            )
        updated.append(descriptor.id)
    if updated:
        logger.info(f"Updated {len(updated)} items in {batch.order_no}: {updated}")
    return updated, skipped


def _insert_lines(session: Session, batch: OrderBatch, header: dict[str, Any]) -> list[int]:
    if not batch.to_insert:
        return []
    rows = [build_insert_row(batch.order_no, header, d) for d in batch.to_insert]
    session.add_all(rows)
    session.flush()
    ids = [row.id for row in rows]
    logger.info(f"Inserted {len(ids)} new items into {batch.order_no}: {ids}")
    return ids


# ── Public API ────────────────────────────────────────────────────────────────


def get_order_lines(
    session: Session, order_no: str, created_at: Optional[datetime] = None
) -> list[OrderLine]:
    """All lines of an order, ordered by id."""
    stmt = select(OrderLine).where(OrderLine.order_no == order_no)
    if created_at is not None:
        # stored instants are UTC; a naive filter value is taken as UTC
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        stmt = stmt.where(OrderLine.created_at == created_at.astimezone(timezone.utc))
    return list(session.exec(stmt.order_by(OrderLine.id)).all())


def reconcile_order(
    session: Session, order_no: str, payload: Any, today: Optional[date] = None
) -> ReconcileResult:
    """
    Bring the order ``order_no`` to the state described by ``payload``.

    Raises OrderValidationError before touching the store for a malformed
    batch; any other error is raised after the transaction is rolled back.
    """
    batch = classify(order_no, payload)
    order_no = batch.order_no
    logger.info(f"Processing order_no: {order_no} ({len(payload)} items received)")

    try:
        exists = _order_exists(session, order_no)
        if not exists and not batch.to_insert:
            raise OrderNotFoundError(
                f"Order {order_no} does not exist and no new items provided"
            )

        verify_ownership(session, order_no, batch.referenced_ids)
        header = resolve_header(batch, today)

        deleted_ids = _delete_lines(session, batch)
        updated_ids, skipped_ids = _update_lines(session, batch)
        inserted_ids = _insert_lines(session, batch, header)
        broadcast_header(session, order_no, header)

        session.commit()
    except Exception as exc:
        session.rollback()
        logger.error(f"Transaction failed for order {order_no}: {exc}")
        raise

    rows = get_order_lines(session, order_no)
    logger.info(f"Successfully processed order {order_no}: {len(rows)} rows in order")
    return ReconcileResult(
        order_no=order_no,
        rows=rows,
        header=header,
        created=not exists,
        inserted_ids=inserted_ids,
        updated_ids=updated_ids,
        deleted_ids=deleted_ids,
        skipped_ids=skipped_ids,
    )


def create_order_lines(session: Session, payload: Any, today: Optional[date] = None) -> list[int]:
    """
    Insert every descriptor in ``payload`` as a new line, all or nothing.
    Each descriptor carries its own ``order_no``; ``date`` is accepted for
    ``order_date``. Returns the new ids in input order.
    """
    if not isinstance(payload, list) or len(payload) == 0:
        raise OrderValidationError("No orders provided")

    rows: list[OrderLine] = []
    errors: list[str] = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            errors.append(f"item {index}: expected an object, got {type(raw).__name__}")
            continue
        order_no = str(raw.get("order_no") or "").strip()
        if not order_no:
            errors.append(f"item {index}: order_no is required")
            continue
        if "order_date" not in raw and "date" in raw:
            raw = {**raw, "order_date": raw["date"]}
        try:
            values = parse_fields(raw, FIELD_PARSERS)
        except FieldParseError as exc:
            errors.append(f"item {index}: {exc.field}: {exc.message}")
            continue

        merged = {**HEADER_DEFAULTS, **LINE_DEFAULTS, **values}
        if merged["order_date"] is None:
            merged["order_date"] = today or date.today()
        rows.append(OrderLine(order_no=order_no, **merged))

    if errors:
        raise OrderValidationError("Invalid orders", errors)

    try:
        session.add_all(rows)
        session.flush()
        ids = [row.id for row in rows]
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.error(f"Bulk order insert failed: {exc}")
        raise

    logger.info(f"Inserted {len(ids)} order lines: {ids}")
    return ids
