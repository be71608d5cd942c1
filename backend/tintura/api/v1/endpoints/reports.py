"""
Report API Endpoints
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tintura.db.session import get_db
from tintura.schemas.report import DelayedOrderResponse, ReportResponse, UnitPerformanceResponse
from tintura.services.report_service import build_report

router = APIRouter()


@router.get("/production", response_model=ReportResponse, summary="Production statistics")
def production_report(
    start_date: Optional[date] = Query(None, description="Inclusive, ISO date"),
    end_date: Optional[date] = Query(None, description="Inclusive, ISO date"),
    unit_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Orders are dated by creation, falling back to the target delivery date.
    """
    stats = build_report(db, start_date=start_date, end_date=end_date, unit_id=unit_id)
    return ReportResponse(
        start_date=start_date,
        end_date=end_date,
        unit_id=unit_id,
        total_orders=stats.total_orders,
        completed_orders=stats.completed_orders,
        total_pieces=stats.total_pieces,
        completion_rate=stats.completion_rate,
        status_distribution=stats.status_distribution,
        unit_performance=[UnitPerformanceResponse.model_validate(p) for p in stats.unit_performance],
        delayed_orders=[DelayedOrderResponse.model_validate(o) for o in stats.delayed_orders],
    )
