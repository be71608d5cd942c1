"""Report schemas."""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel


class UnitPerformanceResponse(BaseModel):
    unit_id: int
    name: str
    total_qty: int
    completed_qty: int

    class Config:
        from_attributes = True


class DelayedOrderResponse(BaseModel):
    id: int
    order_no: str
    unit_id: int
    status: str
    target_delivery_date: Optional[date] = None

    class Config:
        from_attributes = True


class ReportResponse(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    unit_id: Optional[int] = None
    total_orders: int
    completed_orders: int
    total_pieces: int
    completion_rate: Decimal
    status_distribution: Dict[str, int]
    unit_performance: List[UnitPerformanceResponse]
    delayed_orders: List[DelayedOrderResponse]
