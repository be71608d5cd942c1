"""
Barcode model

One physical unit of output, tracked individually from label generation
through stock commit to sale.

Lifecycle: GENERATED → DETAILS_FILLED → PUSHED_OUT_OF_SUBUNIT
           → QC_APPROVED → COMMITTED_TO_STOCK → SOLD
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from tintura.db.base import Base


class Barcode(Base):
    """Barcode - serial format is order_no;style;size;NNNNN"""
    __tablename__ = "barcodes"

    id = Column(Integer, primary_key=True, index=True)
    barcode_serial = Column(String(200), unique=True, nullable=False, index=True)

    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    style_number = Column(String(100), nullable=False)
    size = Column(String(20), nullable=True)

    status = Column(String(30), default="GENERATED", nullable=False, index=True)

    # Set by the stock commit engine and by checkout respectively
    commit_id = Column(Integer, ForeignKey("stock_commits.id"), nullable=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    order = relationship("Order")

    def __repr__(self):
        return f"<Barcode {self.barcode_serial} ({self.status})>"
