"""
Material Request models

Consumables requested by a sub-unit against an order and approved by the
materials department, possibly over several partial rounds.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from tintura.db.base import Base


class MaterialRequest(Base):
    """
    Material Request.

    quantity_approved is the running total of every approval round and
    never exceeds quantity_requested.
    """
    __tablename__ = "material_requests"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    material_content = Column(Text, nullable=False)
    quantity_requested = Column(Numeric(18, 4), nullable=False)
    quantity_approved = Column(Numeric(18, 4), default=0, nullable=False)
    unit = Column(String(20), default="Nos", nullable=False)  # Nos, Kgs, Mtrs...
    attachment_url = Column(String(500), nullable=True)
    requested_by_name = Column(String(100), nullable=True)

    # PENDING, PARTIALLY_APPROVED, APPROVED, REJECTED
    status = Column(String(30), default="PENDING", nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    order = relationship("Order")
    approvals = relationship(
        "MaterialApproval",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="MaterialApproval.created_at",
    )

    def __repr__(self):
        return f"<MaterialRequest {self.id} ({self.status})>"


class MaterialApproval(Base):
    """One approval action - records the delta approved, not the total"""
    __tablename__ = "material_approvals"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(
        Integer,
        ForeignKey("material_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    qty_approved = Column(Numeric(18, 4), nullable=False)
    approved_by_name = Column(String(100), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    request = relationship("MaterialRequest", back_populates="approvals")
