"""Status Configuration and Transition Rules

This module defines valid status values and allowed transitions for
Orders, Barcodes and Material Requests. Transitions are data: adding a
state means adding a table entry, not another branch.
"""
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple


# =============================================================================
# Order Status
# =============================================================================

class OrderStatus(str, Enum):
    """Valid status values for Orders"""
    ASSIGNED = "ASSIGNED"
    STARTED = "STARTED"
    QC = "QC"
    QC_APPROVED = "QC_APPROVED"
    PACKED = "PACKED"  # Legacy, no producer in current flows
    COMPLETED = "COMPLETED"


# The single next status taken by the generic "advance" action
ORDER_NEXT_STATUS: Dict[str, str] = {
    OrderStatus.ASSIGNED: OrderStatus.STARTED,
    OrderStatus.STARTED: OrderStatus.QC,
    OrderStatus.QC: OrderStatus.QC_APPROVED,
    OrderStatus.QC_APPROVED: OrderStatus.COMPLETED,
    OrderStatus.PACKED: OrderStatus.COMPLETED,
}

# Allowed transitions: current_status -> set of allowed next statuses
ORDER_TRANSITIONS: Dict[str, Set[str]] = {
    OrderStatus.ASSIGNED: {OrderStatus.STARTED},
    OrderStatus.STARTED: {OrderStatus.QC},
    OrderStatus.QC: {
        OrderStatus.QC_APPROVED,
        OrderStatus.STARTED,  # QC rejection
    },
    OrderStatus.QC_APPROVED: {OrderStatus.COMPLETED},
    OrderStatus.PACKED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # Terminal state
}

# Transitions that only a dedicated flow may take, keyed by (from, to)
COMPLETION_FLOW = "completion"
QC_REJECTION_FLOW = "qc_rejection"

GUARDED_ORDER_TRANSITIONS: Dict[Tuple[str, str], str] = {
    (OrderStatus.QC_APPROVED, OrderStatus.COMPLETED): COMPLETION_FLOW,
    (OrderStatus.QC, OrderStatus.STARTED): QC_REJECTION_FLOW,
}


def get_next_order_status(current_status: str) -> Optional[OrderStatus]:
    """Next status for the generic advance, or None when terminal/unmapped"""
    nxt = ORDER_NEXT_STATUS.get(current_status)
    return OrderStatus(nxt) if nxt is not None else None


def get_allowed_order_transitions(current_status: str) -> List[str]:
    """Get list of allowed next statuses for an order"""
    return sorted(ORDER_TRANSITIONS.get(current_status, set()))


def is_valid_order_transition(current_status: str, new_status: str) -> bool:
    """Check if an order status transition is valid"""
    allowed = ORDER_TRANSITIONS.get(current_status, set())
    return new_status in allowed


def required_order_flow(current_status: str, new_status: str) -> Optional[str]:
    """Name of the flow that owns a guarded transition, None if unguarded"""
    return GUARDED_ORDER_TRANSITIONS.get((current_status, new_status))


# =============================================================================
# Barcode Status
# =============================================================================

class BarcodeStatus(str, Enum):
    """Valid status values for Barcodes (one physical unit of output)"""
    GENERATED = "GENERATED"
    DETAILS_FILLED = "DETAILS_FILLED"
    PUSHED_OUT_OF_SUBUNIT = "PUSHED_OUT_OF_SUBUNIT"
    QC_APPROVED = "QC_APPROVED"
    COMMITTED_TO_STOCK = "COMMITTED_TO_STOCK"
    SOLD = "SOLD"


BARCODE_NEXT_STATUS: Dict[str, str] = {
    BarcodeStatus.GENERATED: BarcodeStatus.DETAILS_FILLED,
    BarcodeStatus.DETAILS_FILLED: BarcodeStatus.PUSHED_OUT_OF_SUBUNIT,
    BarcodeStatus.PUSHED_OUT_OF_SUBUNIT: BarcodeStatus.QC_APPROVED,
    BarcodeStatus.QC_APPROVED: BarcodeStatus.COMMITTED_TO_STOCK,
    BarcodeStatus.COMMITTED_TO_STOCK: BarcodeStatus.SOLD,
}

# COMMITTED_TO_STOCK belongs to the stock commit engine, SOLD to checkout
STOCK_COMMIT_FLOW = "stock_commit"
CHECKOUT_FLOW = "checkout"

GUARDED_BARCODE_TRANSITIONS: Dict[Tuple[str, str], str] = {
    (BarcodeStatus.QC_APPROVED, BarcodeStatus.COMMITTED_TO_STOCK): STOCK_COMMIT_FLOW,
    (BarcodeStatus.COMMITTED_TO_STOCK, BarcodeStatus.SOLD): CHECKOUT_FLOW,
}

# Barcodes in these states are already part of the stock pool (or left it)
IN_STOCK_OR_SOLD: Set[str] = {
    BarcodeStatus.COMMITTED_TO_STOCK,
    BarcodeStatus.SOLD,
}


def get_next_barcode_status(current_status: str) -> Optional[BarcodeStatus]:
    """Next status in the linear barcode chain, or None when terminal"""
    nxt = BARCODE_NEXT_STATUS.get(current_status)
    return BarcodeStatus(nxt) if nxt is not None else None


def required_barcode_flow(current_status: str, new_status: str) -> Optional[str]:
    return GUARDED_BARCODE_TRANSITIONS.get((current_status, new_status))


# =============================================================================
# Material Request Status
# =============================================================================

class MaterialStatus(str, Enum):
    """Valid status values for Material Requests"""
    PENDING = "PENDING"
    PARTIALLY_APPROVED = "PARTIALLY_APPROVED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Requests in these states accept no further approval rounds
MATERIAL_CLOSED_STATUSES: Set[str] = {
    MaterialStatus.APPROVED,
    MaterialStatus.REJECTED,
}


# =============================================================================
# Audit Log Types
# =============================================================================

class OrderLogType(str, Enum):
    """Kinds of order timeline entries"""
    CREATION = "CREATION"
    STATUS_CHANGE = "STATUS_CHANGE"
    MANUAL_UPDATE = "MANUAL_UPDATE"


# =============================================================================
# Staging Dispositions
# =============================================================================

class StagingDisposition(str, Enum):
    """Classification of a scanned serial in a staging list"""
    READY = "READY"
    DUPLICATE_SCAN = "DUPLICATE_SCAN"
    EXISTS = "EXISTS"
    ERROR = "ERROR"


STAGING_MESSAGES: Dict[str, str] = {
    StagingDisposition.READY: "Ready to add",
    StagingDisposition.DUPLICATE_SCAN: "Already in list below",
    StagingDisposition.EXISTS: "Already in inventory/Sold",
    StagingDisposition.ERROR: "Barcode not found in system",
}


class SizeFormat(str, Enum):
    """How size columns are labelled on prints: S..XXXL or 65..90"""
    STANDARD = "standard"
    NUMERIC = "numeric"
