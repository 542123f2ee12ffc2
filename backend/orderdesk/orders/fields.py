"""
Order-line field catalogue.

Every column a client is allowed to write is listed here, mapped to the parser
that turns a raw JSON value into the column's Python type. Column names that
end up in SQL always come from these tables, never from request keys.

  HEADER_FIELDS     – values shared by every line of an order
  LINE_FIELDS       – values unique to one line
  UPDATABLE_FIELDS  – what an update descriptor may change on an existing line
"""
from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from dateutil import parser as date_parser


class FieldParseError(ValueError):
    """A value could not be parsed for its field."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


# ── Parsers ───────────────────────────────────────────────────────────────────


def parse_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bool, dict, list)):
        raise ValueError("expected text")
    return str(value)


def parse_number(value: Any) -> float:
    """Strict decimal parse. ``None`` and ``""`` mean zero."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValueError("expected a number, got a boolean")
    if isinstance(value, (int, float, Decimal)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"expected a number, got {value!r}")
    else:
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if not number.is_finite():
        raise ValueError("must be a finite number")
    result = float(number)
    if math.isinf(result):
        raise ValueError("number out of range")
    return result


def parse_percentage(value: Any) -> float:
    """Like ``parse_number`` but accepts a trailing ``%`` ("18 %") and enforces 0-100."""
    if isinstance(value, str):
        value = value.strip().removesuffix("%").strip()
    number = parse_number(value)
    if not 0 <= number <= 100:
        raise ValueError(f"percentage must be between 0 and 100, got {number:g}")
    return number


def parse_date(value: Any) -> Optional[date]:
    """ISO date or datetime (``2024-06-05``, ``2024-06-05T10:30:00Z``) → date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected an ISO date, got {type(value).__name__}")
    text = value.strip()
    if not text:
        return None
    try:
        return date_parser.isoparse(text).date()
    except (ValueError, OverflowError):
        raise ValueError(f"expected an ISO date, got {value!r}")


Parser = Callable[[Any], Any]

# ── Field tables ──────────────────────────────────────────────────────────────

HEADER_FIELDS: dict[str, Parser] = {
    "voucher_type": parse_text,
    "order_date": parse_date,
    "customer_code": parse_text,
    "customer_name": parse_text,
    "executive": parse_text,
    "role": parse_text,
    "status": parse_text,
    "total_quantity": parse_number,
    "total_amount": parse_number,
    "total_amount_without_tax": parse_number,
    "total_sgst_amount": parse_number,
    "total_cgst_amount": parse_number,
    "total_igst_amount": parse_number,
    "remarks": parse_text,
}

LINE_FIELDS: dict[str, Parser] = {
    "item_code": parse_text,
    "item_name": parse_text,
    "hsn": parse_text,
    "gst": parse_percentage,
    "sgst": parse_percentage,
    "cgst": parse_percentage,
    "igst": parse_percentage,
    "quantity": parse_number,
    "uom": parse_text,
    "rate": parse_number,
    "amount": parse_number,
    "net_rate": parse_number,
    "gross_amount": parse_number,
    "disc_percentage": parse_percentage,
    "disc_amount": parse_number,
    "spl_disc_percentage": parse_percentage,
    "spl_disc_amount": parse_number,
    "delivery_date": parse_date,
    "delivery_mode": parse_text,
    "transporter_name": parse_text,
}

FIELD_PARSERS: dict[str, Parser] = {**HEADER_FIELDS, **LINE_FIELDS}

# Fields an update descriptor may touch. Part of the client contract.
UPDATABLE_FIELDS: frozenset[str] = frozenset({
    "status", "disc_percentage", "disc_amount", "spl_disc_percentage",
    "spl_disc_amount", "net_rate", "gross_amount", "total_quantity",
    "total_amount", "total_amount_without_tax", "remarks", "quantity",
    "delivery_date", "delivery_mode", "transporter_name",
    "total_sgst_amount", "total_cgst_amount", "total_igst_amount",
    "sgst", "cgst", "igst", "gst", "hsn", "rate", "amount", "uom",
    "item_code", "item_name", "order_date",
})

# Defaults used when a header field is missing from the source descriptor.
# order_date has no static default: it is today's date at resolution time.
HEADER_DEFAULTS: dict[str, Any] = {
    "voucher_type": "Sales Order",
    "order_date": None,
    "customer_code": "",
    "customer_name": "",
    "executive": "",
    "role": "",
    "status": "pending",
    "total_quantity": 0.0,
    "total_amount": 0.0,
    "total_amount_without_tax": 0.0,
    "total_sgst_amount": 0.0,
    "total_cgst_amount": 0.0,
    "total_igst_amount": 0.0,
    "remarks": "",
}

LINE_DEFAULTS: dict[str, Any] = {}
for _name, _parser in LINE_FIELDS.items():
    if _parser is parse_text:
        LINE_DEFAULTS[_name] = ""
    elif _parser is parse_date:
        LINE_DEFAULTS[_name] = None
    else:
        LINE_DEFAULTS[_name] = 0.0


def parse_fields(raw: dict[str, Any], allowed: dict[str, Parser]) -> dict[str, Any]:
    """
    Parse every key of ``raw`` that appears in ``allowed``.
    Unknown keys are dropped. Raises FieldParseError on the first bad value.
    """
    parsed: dict[str, Any] = {}
    for name, parser in allowed.items():
        if name not in raw:
            continue
        try:
            parsed[name] = parser(raw[name])
        except ValueError as exc:
            raise FieldParseError(name, str(exc)) from exc
    return parsed
