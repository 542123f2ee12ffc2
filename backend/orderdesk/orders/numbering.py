"""
Order-number generation.

Format: ``SQ-DD-MM-YY-NNNN``. The sequence restarts at 0001 every day and is
derived from the order numbers already stored; nothing is reserved, so two
callers asking at the same moment get the same suggestion.

Past 9999 the sequence keeps counting with more digits (SQ-..-10000); the
configured width is a minimum, never a truncation.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Optional

from sqlmodel import Session, col, select

from orderdesk.core.config import settings
from orderdesk.models.order import OrderLine


def format_order_day(day: date) -> str:
    """``date(2024, 6, 5)`` → ``"05-06-24"``."""
    return day.strftime("%d-%m-%y")


def _order_no_re(prefix: str) -> re.Pattern:
    return re.compile(rf"^{re.escape(prefix)}-(\d{{2}}-\d{{2}}-\d{{2}})-(\d+)$")


def parse_order_number(order_no: str, prefix: Optional[str] = None) -> Optional[tuple[str, int]]:
    """
    Split an order number into (``"DD-MM-YY"``, sequence).
    Returns None for anything that is not in the expected format.
    """
    m = _order_no_re(prefix or settings.ORDER_NO_PREFIX).match((order_no or "").strip())
    if not m:
        return None
    return m.group(1), int(m.group(2))


def next_order_number(
    latest: Optional[str],
    today: date,
    prefix: Optional[str] = None,
    width: Optional[int] = None,
) -> str:
    """Next order number after ``latest`` for ``today``."""
    prefix = prefix or settings.ORDER_NO_PREFIX
    width = width or settings.ORDER_SEQ_WIDTH
    day = format_order_day(today)

    sequence = 1
    parsed = parse_order_number(latest, prefix) if latest else None
    if parsed and parsed[0] == day:
        sequence = parsed[1] + 1

    return f"{prefix}-{day}-{sequence:0{width}d}"


def latest_order_number(session: Session, today: date, prefix: Optional[str] = None) -> Optional[str]:
    """
    Highest stored order number for ``today``.
    Compared by numeric sequence so that 10000 ranks above 9999.
    """
    prefix = prefix or settings.ORDER_NO_PREFIX
    stem = f"{prefix}-{format_order_day(today)}-"
    candidates = session.exec(
        select(OrderLine.order_no)
        .where(col(OrderLine.order_no).startswith(stem, autoescape=True))
        .distinct()
    ).all()

    best: Optional[tuple[int, str]] = None
    for order_no in candidates:
        parsed = parse_order_number(order_no, prefix)
        if parsed is None:
            continue
        if best is None or parsed[1] > best[0]:
            best = (parsed[1], order_no)
    return best[1] if best else None


def generate_next_order_number(session: Session, today: Optional[date] = None) -> str:
    today = today or date.today()
    return next_order_number(latest_order_number(session, today), today)
