"""Database models"""
from tintura.models.unit import Unit
from tintura.models.order import Order, OrderLog
from tintura.models.barcode import Barcode
from tintura.models.material import MaterialRequest, MaterialApproval
from tintura.models.stock import StockCommit, Invoice

__all__ = [
    # Reference data
    "Unit",
    # Production
    "Order",
    "OrderLog",
    "Barcode",
    # Materials
    "MaterialRequest",
    "MaterialApproval",
    # Stock & sales
    "StockCommit",
    "Invoice",
]
