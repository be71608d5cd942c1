"""
Stock commit and invoice models

Both are immutable once written: a StockCommit records one batch moved
into the stock pool, an Invoice records one sale out of it.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text
from datetime import datetime

from tintura.db.base import Base


class StockCommit(Base):
    """One inventory-commit batch"""
    __tablename__ = "stock_commits"

    id = Column(Integer, primary_key=True, index=True)
    total_items = Column(Integer, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<StockCommit {self.id} items={self.total_items}>"


class Invoice(Base):
    """Point-of-sale invoice; sold barcodes point back via invoice_id"""
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_no = Column(String(50), unique=True, nullable=False, index=True)
    customer_name = Column(String(200), nullable=False)
    total_amount = Column(Numeric(18, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<Invoice {self.invoice_no}>"
