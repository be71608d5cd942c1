"""
Materials Approval Service

Sub-units raise material requests against an order; the materials desk
approves them in one or more rounds. quantity_approved is the running
total and never exceeds quantity_requested. Every round is recorded as a
MaterialApproval carrying the delta.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.orm import Session

from tintura.core.status_config import MATERIAL_CLOSED_STATUSES, MaterialStatus
from tintura.db.repository import Repository, commit_or_rollback
from tintura.exceptions import (
    BusinessRuleError,
    ConcurrencyError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tintura.logging_config import get_logger
from tintura.models import MaterialApproval, MaterialRequest, Order
from tintura.services.quantity import derive_material_status
from tintura.services.receipts import ReceiptPayload, material_approval_receipt

logger = get_logger(__name__)


@dataclass
class ApprovalResult:
    request: MaterialRequest
    approval: MaterialApproval
    receipt: Optional[ReceiptPayload] = None


def _as_decimal(value, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number", field=field_name, value=value)


def get_request(db: Session, request_id: int) -> MaterialRequest:
    request = Repository(db, MaterialRequest).fetch_one(request_id)
    if not request:
        raise NotFoundError("Material request", request_id)
    return request


def create_request(
    db: Session,
    order_id: int,
    material_content: str,
    quantity_requested,
    unit: str = "Nos",
    attachment_url: Optional[str] = None,
    requested_by: Optional[str] = None,
) -> MaterialRequest:
    if not db.get(Order, order_id):
        raise NotFoundError("Order", order_id)
    material_content = (material_content or "").strip()
    if not material_content:
        raise ValidationError("Material description is required", field="material_content")
    quantity = _as_decimal(quantity_requested, "quantity_requested")
    if quantity <= 0:
        raise ValidationError("Requested quantity must be greater than zero", field="quantity_requested")

    request = Repository(db, MaterialRequest).insert(
        MaterialRequest(
            order_id=order_id,
            material_content=material_content,
            quantity_requested=quantity,
            quantity_approved=Decimal("0"),
            unit=(unit or "Nos").strip() or "Nos",
            attachment_url=attachment_url,
            requested_by_name=requested_by,
            status=MaterialStatus.PENDING.value,
            created_at=datetime.utcnow(),
        )
    )
    commit_or_rollback(db, "material request creation")
    db.refresh(request)
    logger.info(
        f"Material request {request.id} raised for order {order_id}",
        extra={"quantity": str(quantity), "unit": request.unit},
    )
    return request


def approve_request(
    db: Session,
    request_id: int,
    additional_qty,
    approved_by: Optional[str] = None,
) -> ApprovalResult:
    """
    Approve another round of a request.

    additional_qty = 0 on an untouched request is an explicit rejection.
    A receipt is returned only when something was actually issued.

    Raises:
        ValidationError: negative delta, or the new total exceeds the request
        InvalidStateError: request already APPROVED or REJECTED
        ConcurrencyError: another round was recorded since the request was read
    """
    request = get_request(db, request_id)
    if request.status in MATERIAL_CLOSED_STATUSES:
        raise InvalidStateError(
            f"Material request {request.id} is already {request.status}",
            current_state=request.status,
        )

    delta = _as_decimal(additional_qty, "additional_qty")
    if delta < 0:
        raise ValidationError("Approved quantity cannot be negative", field="additional_qty", value=delta)

    requested = Decimal(request.quantity_requested)
    prior = Decimal(request.quantity_approved or 0)
    new_total = prior + delta
    if new_total > requested:
        raise ValidationError(
            f"Approval exceeds remaining balance of {requested - prior}",
            field="additional_qty",
            value=delta,
        )

    new_status = derive_material_status(requested, new_total, explicit_rejection=(new_total == 0 and prior == 0))

    # Keyed on the values read above; a concurrent round makes this match nothing
    swapped = Repository(db, MaterialRequest).update_where(
        {"id": request.id, "quantity_approved": request.quantity_approved, "status": request.status},
        {"quantity_approved": new_total, "status": new_status.value},
    )
    if swapped != 1:
        db.rollback()
        raise ConcurrencyError(
            f"Material request {request.id} was approved by someone else; reload and retry",
            details={"request_id": request.id},
        )

    approval = Repository(db, MaterialApproval).insert(
        MaterialApproval(
            request_id=request.id,
            qty_approved=delta,
            approved_by_name=approved_by,
            created_at=datetime.utcnow(),
        )
    )
    commit_or_rollback(db, f"approval of material request {request.id}")
    db.refresh(request)
    db.refresh(approval)

    logger.info(
        f"Material request {request.id}: +{delta} → {request.quantity_approved}/{requested} ({request.status})"
    )
    receipt = material_approval_receipt(request, approval) if delta > 0 else None
    return ApprovalResult(request=request, approval=approval, receipt=receipt)


def list_requests(
    db: Session,
    order_id: Optional[int] = None,
    status: Optional[List[str]] = None,
) -> List[MaterialRequest]:
    query = db.query(MaterialRequest)
    if order_id is not None:
        query = query.filter(MaterialRequest.order_id == order_id)
    if status:
        query = query.filter(MaterialRequest.status.in_(status))
    return query.order_by(MaterialRequest.created_at.desc(), MaterialRequest.id.desc()).all()


def list_approvals(db: Session, request_id: int) -> List[MaterialApproval]:
    get_request(db, request_id)
    return Repository(db, MaterialApproval).fetch_all(
        order_by=MaterialApproval.id, request_id=request_id
    )


def delete_request(db: Session, request_id: int) -> None:
    """Withdraw a request; only while nothing has been issued against it"""
    request = get_request(db, request_id)
    if Decimal(request.quantity_approved or 0) > 0:
        raise BusinessRuleError(
            f"Material request {request.id} has approved quantity and cannot be deleted",
            rule="material_already_issued",
        )
    db.delete(request)
    commit_or_rollback(db, f"deletion of material request {request_id}")
    logger.info(f"Deleted material request {request_id}")
