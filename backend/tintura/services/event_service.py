"""
Event Service

Centralized helper for recording order timeline entries.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from tintura.core.status_config import OrderLogType
from tintura.models.order import OrderLog


def record_order_log(
    db: Session,
    order_id: int,
    log_type: OrderLogType,
    message: str,
    created_by_name: Optional[str] = None,
) -> OrderLog:
    """
    Record a timeline entry for an order.

    Args:
        db: Database session
        order_id: ID of the order
        log_type: CREATION, STATUS_CHANGE or MANUAL_UPDATE
        message: What happened
        created_by_name: Free-text actor name (not an authenticated identity)

    Returns:
        The created OrderLog instance
    """
    entry = OrderLog(
        order_id=order_id,
        log_type=log_type.value,
        message=message,
        created_by_name=created_by_name or "System",
        created_at=datetime.utcnow(),
    )
    db.add(entry)
    # Don't commit - let the calling function handle the transaction
    return entry


def status_change_message(new_status: str, note: Optional[str] = None) -> str:
    if note:
        return f"Status changed to {new_status}. Note: {note}"
    return f"Status changed to {new_status}"


def list_order_logs(db: Session, order_id: int) -> List[OrderLog]:
    """Timeline for one order, newest first"""
    return (
        db.query(OrderLog)
        .filter(OrderLog.order_id == order_id)
        .order_by(OrderLog.created_at.desc(), OrderLog.id.desc())
        .all()
    )
