"""
Order API Endpoints

Issuance and administration, lifecycle actions (advance, QC decision,
completion), the order timeline and the planned vs. actual grid.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tintura.db.session import get_db
from tintura.schemas.common import MessageResponse
from tintura.schemas.order import (
    AdvanceRequest,
    CellComparisonResponse,
    CompletionRequest,
    OrderBreakdownResponse,
    OrderCreate,
    OrderLogResponse,
    OrderResponse,
    OrderUpdate,
    ProgressNoteRequest,
    QCDecisionRequest,
    RowComparisonResponse,
)
from tintura.services import order_service
from tintura.services.event_service import list_order_logs
from tintura.services.order_status import order_status_service
from tintura.services.quantity import size_labels

router = APIRouter()


# ============================================================================
# ADMINISTRATION
# ============================================================================

@router.get("/", response_model=List[OrderResponse], summary="List orders")
def list_orders(
    unit_id: Optional[int] = Query(None, description="Only orders of this unit"),
    status_filter: Optional[List[str]] = Query(None, alias="status", description="Repeatable status filter"),
    search: Optional[str] = Query(None, description="Match on order number or style"),
    db: Session = Depends(get_db),
):
    return order_service.list_orders(db, unit_id=unit_id, status=status_filter, search=search)


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue a new order to a unit",
)
def create_order(request: OrderCreate, db: Session = Depends(get_db)):
    """
    Create an order in ASSIGNED status.

    quantity is the total of the size breakdown; a zero total is rejected.
    """
    return order_service.create_order(
        db,
        unit_id=request.unit_id,
        style_number=request.style_number,
        size_breakdown=[row.model_dump() for row in request.size_breakdown],
        box_count=request.box_count,
        target_delivery_date=request.target_delivery_date,
        description=request.description,
        attachment_url=request.attachment_url,
        attachment_name=request.attachment_name,
        size_format=request.size_format.value,
        created_by=request.created_by,
    )


@router.get("/{order_id}", response_model=OrderResponse, summary="Get an order")
def get_order(order_id: int, db: Session = Depends(get_db)):
    return order_service.get_order(db, order_id)


@router.patch("/{order_id}", response_model=OrderResponse, summary="Edit order details")
def update_order(order_id: int, request: OrderUpdate, db: Session = Depends(get_db)):
    values = request.model_dump(exclude_unset=True, exclude={"updated_by"})
    if values.get("size_format") is not None:
        values["size_format"] = values["size_format"].value
    return order_service.update_order_details(db, order_id, values, updated_by=request.updated_by)


@router.delete("/{order_id}", response_model=MessageResponse, summary="Delete an order")
def delete_order(order_id: int, db: Session = Depends(get_db)):
    """Refused once any of the order's barcodes is in stock or sold."""
    order_service.delete_order(db, order_id)
    return MessageResponse(message=f"Order {order_id} deleted")


# ============================================================================
# LIFECYCLE
# ============================================================================

@router.post("/{order_id}/advance", response_model=OrderResponse, summary="Advance to the next status")
def advance_order(order_id: int, request: Optional[AdvanceRequest] = None, db: Session = Depends(get_db)):
    """
    Move the order one step along ASSIGNED → STARTED → QC → QC_APPROVED.

    QC_APPROVED → COMPLETED is refused here: use the completion endpoint.
    """
    actor = request.actor if request else None
    return order_status_service.advance(db, order_id, actor=actor)


@router.post("/{order_id}/qc-decision", response_model=OrderResponse, summary="Record a QC verdict")
def qc_decision(order_id: int, request: QCDecisionRequest, db: Session = Depends(get_db)):
    return order_status_service.record_qc_decision(
        db,
        order_id,
        accept=request.accept,
        note=request.note,
        attachment_url=request.attachment_url,
        actor=request.actor,
    )


@router.post("/{order_id}/complete", response_model=OrderResponse, summary="Complete with actual quantities")
def complete_order(order_id: int, request: CompletionRequest, db: Session = Depends(get_db)):
    return order_status_service.complete(
        db,
        order_id,
        completion_breakdown=[row.model_dump() for row in request.completion_breakdown],
        actual_box_count=request.actual_box_count,
        actor=request.actor,
    )


# ============================================================================
# TIMELINE & DETAIL
# ============================================================================

@router.get("/{order_id}/logs", response_model=List[OrderLogResponse], summary="Order timeline, newest first")
def get_order_logs(order_id: int, db: Session = Depends(get_db)):
    order_service.get_order(db, order_id)
    return list_order_logs(db, order_id)


@router.post(
    "/{order_id}/logs",
    response_model=OrderLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a progress note",
)
def add_progress_note(order_id: int, request: ProgressNoteRequest, db: Session = Depends(get_db)):
    return order_status_service.add_progress_note(db, order_id, request.message, actor=request.actor)


@router.get("/{order_id}/breakdown", response_model=OrderBreakdownResponse, summary="Planned vs. actual grid")
def get_breakdown(order_id: int, db: Session = Depends(get_db)):
    order, rows = order_service.get_order_breakdown(db, order_id)
    return OrderBreakdownResponse(
        order_id=order.id,
        order_no=order.order_no,
        status=order.status,
        size_labels=size_labels(order.size_format),
        rows=[
            RowComparisonResponse(
                color=row.color,
                cells={
                    size: CellComparisonResponse(planned=cell.planned, actual=cell.actual, mismatch=cell.mismatch)
                    for size, cell in row.cells.items()
                },
                total=CellComparisonResponse(
                    planned=row.total.planned, actual=row.total.actual, mismatch=row.total.mismatch
                ),
                has_actual=row.has_actual,
                mismatched_sizes=row.mismatched_sizes,
            )
            for row in rows
        ],
    )
