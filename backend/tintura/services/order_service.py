"""
Order administration

Issuing orders to units, editing their details, listing and safe deletion.
Status changes live in order_status.py.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tintura.core.settings import settings
from tintura.core.status_config import IN_STOCK_OR_SOLD, OrderLogType, OrderStatus, SizeFormat
from tintura.db.repository import Repository, commit_or_rollback
from tintura.exceptions import BusinessRuleError, DuplicateError, NotFoundError, ValidationError
from tintura.logging_config import get_logger
from tintura.models import Barcode, MaterialRequest, Order, Unit
from tintura.services.event_service import record_order_log
from tintura.services.quantity import compare_breakdowns, order_total, validate_breakdown

logger = get_logger(__name__)

CREATION_MESSAGE = "Order Created and Assigned"
ADMIN_UPDATE_MESSAGE = "Order details updated by Admin"

# Fields an admin may edit after issuance
EDITABLE_FIELDS = (
    "description",
    "target_delivery_date",
    "box_count",
    "attachment_url",
    "attachment_name",
    "size_format",
)


def next_order_no(db: Session) -> str:
    """
    Next ORD-<n> number: one past the highest issued, never below the start.

    A concurrent create that picks the same number loses on the unique
    constraint and is reported as a duplicate.
    """
    prefix = settings.ORDER_NO_PREFIX
    highest = settings.ORDER_NO_START - 1
    for (order_no,) in db.query(Order.order_no).filter(Order.order_no.like(f"{prefix}%")):
        suffix = order_no[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1}"


def get_order(db: Session, order_id: int) -> Order:
    order = Repository(db, Order).fetch_one(order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    return order


def create_order(
    db: Session,
    unit_id: int,
    style_number: str,
    size_breakdown: List[Dict[str, Any]],
    box_count: Optional[int] = None,
    target_delivery_date: Optional[date] = None,
    description: Optional[str] = None,
    attachment_url: Optional[str] = None,
    attachment_name: Optional[str] = None,
    size_format: str = SizeFormat.STANDARD.value,
    created_by: Optional[str] = None,
) -> Order:
    """
    Issue a new order to a unit.

    quantity is captured once from the breakdown total and never
    recomputed afterwards.
    """
    if not db.get(Unit, unit_id):
        raise NotFoundError("Unit", unit_id)
    style_number = (style_number or "").strip()
    if not style_number:
        raise ValidationError("Style number is required", field="style_number")

    rows = [dict(row) for row in (size_breakdown or [])]
    validate_breakdown(rows)
    quantity = order_total(rows)
    if quantity <= 0:
        raise ValidationError("Order quantity must be greater than zero", field="size_breakdown")

    order_no = next_order_no(db)
    order = Order(
        order_no=order_no,
        unit_id=unit_id,
        style_number=style_number,
        quantity=quantity,
        box_count=box_count,
        size_breakdown=rows,
        size_format=size_format,
        description=description,
        attachment_url=attachment_url,
        attachment_name=attachment_name,
        target_delivery_date=target_delivery_date,
        status=OrderStatus.ASSIGNED.value,
        last_barcode_serial=0,
    )
    try:
        Repository(db, Order).insert(order)
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError("Order", field="order_no", value=order_no) from e

    record_order_log(db, order.id, OrderLogType.CREATION, CREATION_MESSAGE, created_by_name=created_by)
    commit_or_rollback(db, f"creation of order {order_no}")
    db.refresh(order)

    logger.info(
        f"Created order {order.order_no}",
        extra={"unit_id": unit_id, "style_number": style_number, "quantity": quantity},
    )
    return order


def list_orders(
    db: Session,
    unit_id: Optional[int] = None,
    status: Optional[List[str]] = None,
    search: Optional[str] = None,
) -> List[Order]:
    """Orders newest first, optionally narrowed by unit, statuses and a search term"""
    query = db.query(Order)
    if unit_id is not None:
        query = query.filter(Order.unit_id == unit_id)
    if status:
        query = query.filter(Order.status.in_(status))
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(Order.order_no.ilike(term), Order.style_number.ilike(term)))
    return query.order_by(Order.id.desc()).all()


def update_order_details(
    db: Session,
    order_id: int,
    values: Dict[str, Any],
    updated_by: Optional[str] = None,
) -> Order:
    """Edit descriptive fields; quantity and matrices stay as issued"""
    order = get_order(db, order_id)
    changes = {k: v for k, v in values.items() if k in EDITABLE_FIELDS}
    if not changes:
        return order

    if "box_count" in changes and changes["box_count"] is not None and changes["box_count"] < 0:
        raise ValidationError("Box count must be zero or more", field="box_count")

    Repository(db, Order).update(order.id, {**changes, "updated_at": datetime.utcnow()})
    record_order_log(db, order.id, OrderLogType.MANUAL_UPDATE, ADMIN_UPDATE_MESSAGE, created_by_name=updated_by)
    commit_or_rollback(db, f"update of order {order.order_no}")
    db.refresh(order)
    logger.info(f"Updated order {order.order_no}", extra={"fields": sorted(changes)})
    return order


def delete_order(db: Session, order_id: int) -> None:
    """
    Delete an order with its barcodes, material requests and timeline.

    Refused once any unit of the order is in stock or sold, since stock
    commits and invoices point at those barcodes.
    """
    order = get_order(db, order_id)
    locked = Repository(db, Barcode).count(order_id=order.id, status=list(IN_STOCK_OR_SOLD))
    if locked:
        raise BusinessRuleError(
            f"Order {order.order_no} has {locked} barcode(s) in stock or sold and cannot be deleted",
            rule="order_has_stock",
        )

    order_no = order.order_no
    Repository(db, Barcode).delete_where(order_id=order.id)
    for request in Repository(db, MaterialRequest).fetch_all(order_id=order.id):
        db.delete(request)
    db.delete(order)
    commit_or_rollback(db, f"deletion of order {order_no}")
    logger.info(f"Deleted order {order_no}")


def get_order_breakdown(db: Session, order_id: int):
    """Planned vs. actual grid for the order detail view"""
    order = get_order(db, order_id)
    return order, compare_breakdowns(order.status, order.size_breakdown, order.completion_breakdown)
