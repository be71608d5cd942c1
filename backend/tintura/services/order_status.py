"""
Order Status Management Service

Applies the order state machine: generic advance, QC decisions and the
completion flow. Every status change writes a STATUS_CHANGE timeline
entry in the same transaction as the status itself.
"""
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
from sqlalchemy.orm import Session

from tintura.core.status_config import (
    COMPLETION_FLOW,
    OrderLogType,
    OrderStatus,
    QC_REJECTION_FLOW,
    get_allowed_order_transitions,
    get_next_order_status,
    is_valid_order_transition,
    required_order_flow,
)
from tintura.db.repository import commit_or_rollback
from tintura.exceptions import InvalidStateError, NotFoundError, ValidationError
from tintura.logging_config import get_logger
from tintura.models.order import Order
from tintura.services.event_service import record_order_log, status_change_message
from tintura.services.quantity import validate_completion

logger = get_logger(__name__)


def _get_order(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    return order


class OrderStatusService:
    """
    Manages order status transitions.

    Responsibilities:
    - Validate transitions against the FSM table
    - Keep guarded transitions inside their owning flow
    - Write the audit entry alongside every change
    """

    def validate_transition(
        self, from_status: str, to_status: str, flow: Optional[str] = None
    ) -> Tuple[bool, str]:
        """
        Validate an order status transition.

        Args:
            from_status: Current status
            to_status: Desired status
            flow: Name of the flow requesting the change (None = generic advance)

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not is_valid_order_transition(from_status, to_status):
            valid_next = get_allowed_order_transitions(from_status)
            return False, (
                f"Invalid order status transition: '{from_status}' → '{to_status}'. "
                f"Valid options: {', '.join(valid_next) or 'none (terminal)'}"
            )

        owner = required_order_flow(from_status, to_status)
        if owner is not None and owner != flow:
            return False, (
                f"Transition '{from_status}' → '{to_status}' requires the {owner.replace('_', ' ')} flow"
            )

        return True, ""

    def _apply(
        self,
        db: Session,
        order: Order,
        new_status: OrderStatus,
        note: Optional[str] = None,
        actor: Optional[str] = None,
        flow: Optional[str] = None,
        extra_values: Optional[Dict[str, Any]] = None,
    ) -> Order:
        is_valid, error = self.validate_transition(order.status, new_status.value, flow=flow)
        if not is_valid:
            raise InvalidStateError(
                error,
                current_state=order.status,
                allowed_states=get_allowed_order_transitions(order.status),
            )

        old_status = order.status
        order.status = new_status.value
        order.updated_at = datetime.utcnow()
        if note:
            order.qc_notes = note
        for key, value in (extra_values or {}).items():
            setattr(order, key, value)

        record_order_log(
            db,
            order.id,
            OrderLogType.STATUS_CHANGE,
            status_change_message(new_status.value, note),
            created_by_name=actor,
        )
        commit_or_rollback(db, f"status change of {order.order_no}")
        db.refresh(order)

        logger.info(f"Order {order.order_no}: {old_status} → {new_status.value}")
        return order

    # ========================================================================
    # GENERIC ADVANCE
    # ========================================================================

    def advance(self, db: Session, order_id: int, actor: Optional[str] = None) -> Order:
        """
        Move an order to its single next status.

        Raises:
            NotFoundError: Unknown order
            InvalidStateError: Terminal status, or the next step belongs to a
                dedicated flow (QC_APPROVED → COMPLETED needs completion data)
        """
        order = _get_order(db, order_id)
        next_status = get_next_order_status(order.status)
        if next_status is None:
            raise InvalidStateError(
                f"Order {order.order_no} is in terminal status {order.status}",
                current_state=order.status,
            )
        return self._apply(db, order, next_status, actor=actor)

    # ========================================================================
    # QC DECISION
    # ========================================================================

    def record_qc_decision(
        self,
        db: Session,
        order_id: int,
        accept: bool,
        note: Optional[str] = None,
        attachment_url: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Order:
        """
        Accept (QC → QC_APPROVED) or reject (QC → STARTED) an order.

        A rejection must carry a note explaining what to rework.
        """
        order = _get_order(db, order_id)
        note = (note or "").strip()
        extra = {"qc_attachment_url": attachment_url} if attachment_url else None

        if accept:
            return self._apply(
                db, order, OrderStatus.QC_APPROVED,
                note=f"QC PASSED: {note}" if note else "QC PASSED",
                actor=actor, extra_values=extra,
            )

        if not note:
            raise ValidationError("A rejection note is required", field="note")
        return self._apply(
            db, order, OrderStatus.STARTED,
            note=f"QC REJECTED: {note}",
            actor=actor, flow=QC_REJECTION_FLOW, extra_values=extra,
        )

    # ========================================================================
    # COMPLETION FLOW
    # ========================================================================

    def complete(
        self,
        db: Session,
        order_id: int,
        completion_breakdown: List[Dict[str, Any]],
        actual_box_count: int,
        actor: Optional[str] = None,
    ) -> Order:
        """
        QC_APPROVED → COMPLETED with the actual produced matrix.

        Completion rows are matched to planned rows by color; a color that
        is not in the plan is rejected.
        """
        order = _get_order(db, order_id)
        if actual_box_count is None or actual_box_count < 0:
            raise ValidationError("Actual box count must be zero or more", field="actual_box_count")
        if not completion_breakdown:
            raise ValidationError("Completion breakdown is required", field="completion_breakdown")
        validate_completion(order.size_breakdown, completion_breakdown)

        return self._apply(
            db, order, OrderStatus.COMPLETED,
            actor=actor, flow=COMPLETION_FLOW,
            extra_values={
                "completion_breakdown": [dict(row) for row in completion_breakdown],
                "actual_box_count": actual_box_count,
            },
        )

    # ========================================================================
    # TIMELINE NOTES
    # ========================================================================

    def add_progress_note(
        self, db: Session, order_id: int, message: str, actor: Optional[str] = None
    ):
        """Free-text progress update on the order timeline (no status change)"""
        order = _get_order(db, order_id)
        message = (message or "").strip()
        if not message:
            raise ValidationError("Update text is required", field="message")
        entry = record_order_log(db, order.id, OrderLogType.MANUAL_UPDATE, message, created_by_name=actor)
        commit_or_rollback(db, f"progress note on {order.order_no}")
        db.refresh(entry)
        return entry


# Singleton instance
order_status_service = OrderStatusService()
