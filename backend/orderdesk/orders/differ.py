"""
Order-line differ.

Turns the raw request body (a list of line descriptors describing the desired
end state of one order) into three disjoint sets:

  to_delete  – has an id and ``_deleted`` set
  to_update  – has an id, not deleted (ascending id order)
  to_insert  – no id, not deleted (submission order)

Descriptor shapes:
    {"id": 10, "quantity": 5}          → update line 10
    {"item_code": "A", "quantity": 2}  → insert a new line
    {"id": 11, "_deleted": true}       → delete line 11

Everything here except ``verify_ownership`` runs without touching the store,
so a malformed batch is rejected before a transaction is opened.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from loguru import logger
from sqlmodel import Session, col, select

from orderdesk.exceptions import OrderValidationError, OwnershipError
from orderdesk.models.order import OrderLine
from orderdesk.orders.fields import (
    FIELD_PARSERS,
    HEADER_FIELDS,
    LINE_FIELDS,
    UPDATABLE_FIELDS,
    FieldParseError,
    parse_fields,
)

DELETED_FLAG = "_deleted"

_TRUE_STRINGS = {"true", "1", "yes"}


@dataclass
class LineDescriptor:
    """One parsed entry of the request body."""

    index: int                      # position in the request body
    id: Optional[int] = None
    deleted: bool = False
    values: dict[str, Any] = field(default_factory=dict)   # parsed, allowlisted

    @property
    def header_values(self) -> dict[str, Any]:
        return {k: v for k, v in self.values.items() if k in HEADER_FIELDS}

    @property
    def line_values(self) -> dict[str, Any]:
        return {k: v for k, v in self.values.items() if k in LINE_FIELDS}

    @property
    def update_values(self) -> dict[str, Any]:
        return {k: v for k, v in self.values.items() if k in UPDATABLE_FIELDS}


@dataclass
class OrderBatch:
    """A classified batch for one order number."""

    order_no: str
    to_insert: list[LineDescriptor] = field(default_factory=list)
    to_update: list[LineDescriptor] = field(default_factory=list)
    to_delete: list[LineDescriptor] = field(default_factory=list)
    ignored: list[LineDescriptor] = field(default_factory=list)

    @property
    def referenced_ids(self) -> list[int]:
        """Ids the batch intends to mutate (delete or update)."""
        return [d.id for d in self.to_delete] + [d.id for d in self.to_update]

    @property
    def live(self) -> list[LineDescriptor]:
        """Non-deleted descriptors: existing lines by id, then new lines."""
        return self.to_update + self.to_insert


# ── Parsing ───────────────────────────────────────────────────────────────────


def _parse_id(value: Any) -> Optional[int]:
    # 0, None and "" all mean "not persisted yet"
    if value is None or value == "" or value == 0:
        return None
    if isinstance(value, bool):
        raise ValueError("id must be an integer")
    if isinstance(value, int):
        line_id = value
    elif isinstance(value, str) and value.strip().isdigit():
        line_id = int(value.strip())
    elif isinstance(value, float) and value.is_integer():
        line_id = int(value)
    else:
        raise ValueError(f"id must be an integer, got {value!r}")
    if line_id <= 0:
        raise ValueError(f"id must be positive, got {line_id}")
    return line_id


def _parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def parse_descriptor(raw: Any, index: int) -> LineDescriptor:
    """Parse one descriptor. Raises ValueError / FieldParseError with a readable message."""
    if not isinstance(raw, dict):
        raise ValueError(f"expected an object, got {type(raw).__name__}")

    descriptor = LineDescriptor(
        index=index,
        id=_parse_id(raw.get("id")),
        deleted=_parse_flag(raw.get(DELETED_FLAG)),
    )
    if not descriptor.deleted:
        descriptor.values = parse_fields(raw, FIELD_PARSERS)
    return descriptor


# ── Classification ────────────────────────────────────────────────────────────


def classify(order_no: Optional[str], payload: Any) -> OrderBatch:
    """
    Validate and partition a request body. Raises OrderValidationError listing
    every bad descriptor; nothing is classified unless the whole batch parses.
    """
    if not order_no or not str(order_no).strip():
        raise OrderValidationError("Order Number is required")
    if not isinstance(payload, list) or len(payload) == 0:
        raise OrderValidationError("No data provided")

    batch = OrderBatch(order_no=str(order_no).strip())
    errors: list[str] = []
    seen_ids: dict[int, int] = {}

    for index, raw in enumerate(payload):
        try:
            descriptor = parse_descriptor(raw, index)
        except FieldParseError as exc:
            errors.append(f"item {index}: {exc.field}: {exc.message}")
            continue
        except ValueError as exc:
            errors.append(f"item {index}: {exc}")
            continue

        if descriptor.id is not None:
            if descriptor.id in seen_ids:
                errors.append(
                    f"item {index}: id {descriptor.id} already used by item {seen_ids[descriptor.id]}"
                )
                continue
            seen_ids[descriptor.id] = index

        if descriptor.deleted and descriptor.id is not None:
            batch.to_delete.append(descriptor)
        elif descriptor.deleted:
            logger.warning(f"Ignoring item {index} of {batch.order_no}: marked deleted but has no id")
            batch.ignored.append(descriptor)
        elif descriptor.id is not None:
            batch.to_update.append(descriptor)
        else:
            batch.to_insert.append(descriptor)

    if errors:
        raise OrderValidationError("Invalid order lines", errors)

    batch.to_update.sort(key=lambda d: d.id)
    logger.info(
        f"Classified {batch.order_no}: {len(batch.to_insert)} insert, "
        f"{len(batch.to_update)} update, {len(batch.to_delete)} delete"
    )
    return batch


# ── Ownership ─────────────────────────────────────────────────────────────────


def verify_ownership(session: Session, order_no: str, ids: list[int]) -> None:
    """
    Every id must exist and belong to ``order_no``. Must run inside the
    reconciliation transaction, before any mutation.
    """
    if not ids:
        return
    rows = session.exec(
        select(OrderLine.id, OrderLine.order_no).where(col(OrderLine.id).in_(ids))
    ).all()
    owners = {line_id: owner for line_id, owner in rows}

    missing = [i for i in ids if i not in owners]
    if missing:
        raise OwnershipError(
            f"Items {', '.join(map(str, missing))} do not exist", missing
        )
    foreign = [i for i in ids if owners[i] != order_no]
    if foreign:
        detail = ", ".join(f"{i} (order {owners[i]})" for i in foreign)
        raise OwnershipError(
            f"Items {detail} do not belong to order {order_no}", foreign
        )
