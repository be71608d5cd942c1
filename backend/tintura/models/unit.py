"""
Production Unit model

A production location (main HQ or a sewing/finishing sub-unit) that
orders are assigned to. Static reference data.
"""
from sqlalchemy import Column, Integer, String, Boolean

from tintura.db.base import Base


class Unit(Base):
    """Production Unit"""
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    is_main = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Unit {self.id} {self.name}>"
