"""Exceptions raised by the order services."""
from typing import Any, Optional


class OrderDeskError(Exception):
    """Base exception for all order service errors."""

    def __init__(self, message: str = "An internal error occurred", status_code: int = 500,
                 payload: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self) -> dict[str, Any]:
        rv = dict(self.payload or ())
        rv["message"] = self.message
        return rv


class OrderValidationError(OrderDeskError):
    """Malformed batch; raised before any store access."""

    def __init__(self, message: str, details: Optional[list[str]] = None):
        super().__init__(message, 400, {"details": details or [message]})
        self.details = details or [message]


class OwnershipError(OrderDeskError):
    """A referenced line id is missing or belongs to another order."""

    def __init__(self, message: str, ids: Optional[list[int]] = None):
        super().__init__(message, 500, {"ids": ids or []})
        self.ids = ids or []


class ZeroRowsAffectedError(OrderDeskError):
    """A targeted update or delete touched fewer rows than expected."""

    def __init__(self, message: str):
        super().__init__(message, 500)


class OrderNotFoundError(OrderDeskError):
    """No rows exist for the order number."""

    def __init__(self, message: str = "No orders found"):
        super().__init__(message, 404)
