"""
Material Request API Endpoints

Sub-units raise requests; the materials desk approves them in rounds.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tintura.db.session import get_db
from tintura.schemas.common import MessageResponse
from tintura.schemas.material import (
    MaterialApprovalResponse,
    MaterialApprovalResult,
    MaterialApproveRequest,
    MaterialRequestCreate,
    MaterialRequestResponse,
)
from tintura.services import material_service

router = APIRouter()


@router.get("/", response_model=List[MaterialRequestResponse], summary="List material requests")
def list_requests(
    order_id: Optional[int] = Query(None),
    status_filter: Optional[List[str]] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    return material_service.list_requests(db, order_id=order_id, status=status_filter)


@router.post(
    "/",
    response_model=MaterialRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Raise a material request",
)
def create_request(request: MaterialRequestCreate, db: Session = Depends(get_db)):
    return material_service.create_request(
        db,
        order_id=request.order_id,
        material_content=request.material_content,
        quantity_requested=request.quantity_requested,
        unit=request.unit,
        attachment_url=request.attachment_url,
        requested_by=request.requested_by,
    )


@router.get("/{request_id}", response_model=MaterialRequestResponse, summary="Get a material request")
def get_request(request_id: int, db: Session = Depends(get_db)):
    return material_service.get_request(db, request_id)


@router.post("/{request_id}/approve", response_model=MaterialApprovalResult, summary="Approve a round")
def approve_request(request_id: int, request: MaterialApproveRequest, db: Session = Depends(get_db)):
    """
    Issue `additional_qty` more against the request.

    - Running total may not exceed the requested quantity
    - 0 on an untouched request rejects it
    - APPROVED and REJECTED requests are closed
    """
    result = material_service.approve_request(
        db, request_id, request.additional_qty, approved_by=request.approved_by
    )
    return MaterialApprovalResult(
        request=MaterialRequestResponse.model_validate(result.request),
        approval=MaterialApprovalResponse.model_validate(result.approval),
        receipt=result.receipt.to_dict() if result.receipt else None,
    )


@router.get(
    "/{request_id}/approvals",
    response_model=List[MaterialApprovalResponse],
    summary="Approval history of a request",
)
def list_approvals(request_id: int, db: Session = Depends(get_db)):
    return material_service.list_approvals(db, request_id)


@router.delete("/{request_id}", response_model=MessageResponse, summary="Withdraw a material request")
def delete_request(request_id: int, db: Session = Depends(get_db)):
    material_service.delete_request(db, request_id)
    return MessageResponse(message=f"Material request {request_id} deleted")
