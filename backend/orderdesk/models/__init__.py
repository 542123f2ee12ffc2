from orderdesk.models.people import Admin, Customer
from orderdesk.models.stock import StockItem
from orderdesk.models.order import OrderLine

__all__ = [
    "Admin",
    "Customer",
    "StockItem",
    "OrderLine",
]
