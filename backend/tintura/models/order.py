"""
Order model

Manufacturing jobs issued by Admin to a production unit.

Lifecycle: ASSIGNED → STARTED → QC → QC_APPROVED → COMPLETED
QC paths: QC → STARTED (rejection, note required)
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from tintura.core.status_config import SizeFormat
from tintura.db.base import Base


class Order(Base):
    """
    Order - one style produced by one unit.

    quantity is captured from size_breakdown at creation and never
    recomputed. completion_breakdown holds the actual produced matrix,
    keyed to size_breakdown by row color.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_no = Column(String(50), unique=True, nullable=False, index=True)

    unit_id = Column(Integer, ForeignKey("units.id"), nullable=False, index=True)
    style_number = Column(String(100), nullable=False, index=True)

    # Quantities
    quantity = Column(Integer, nullable=False)
    box_count = Column(Integer, nullable=True)  # Planned boxes
    actual_box_count = Column(Integer, nullable=True)  # Set at completion

    # Per-order barcode sequence, only ever incremented
    last_barcode_serial = Column(Integer, default=0, nullable=False)

    # Size matrices: [{color, s, m, l, xl, xxl, xxxl}, ...]
    size_breakdown = Column(JSON, nullable=True)
    completion_breakdown = Column(JSON, nullable=True)
    size_format = Column(String(20), default=SizeFormat.STANDARD.value, nullable=False)

    description = Column(Text, nullable=True)
    qc_notes = Column(Text, nullable=True)
    qc_attachment_url = Column(String(500), nullable=True)
    attachment_url = Column(String(500), nullable=True)
    attachment_name = Column(String(255), nullable=True)

    target_delivery_date = Column(Date, nullable=True, index=True)

    # ASSIGNED, STARTED, QC, QC_APPROVED, PACKED, COMPLETED
    status = Column(String(30), default="ASSIGNED", nullable=False, index=True)

    created_at = Column(DateTime, nullable=True, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=True, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    unit = relationship("Unit")
    logs = relationship(
        "OrderLog",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLog.created_at",
    )

    def __repr__(self):
        return f"<Order {self.order_no} ({self.status})>"


class OrderLog(Base):
    """Order timeline entry - append-only audit trail"""
    __tablename__ = "order_logs"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # CREATION, STATUS_CHANGE, MANUAL_UPDATE
    log_type = Column(String(30), nullable=False, index=True)
    message = Column(Text, nullable=False)
    created_by_name = Column(String(100), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    order = relationship("Order", back_populates="logs")

    def __repr__(self):
        return f"<OrderLog {self.log_type} for order {self.order_id}>"
