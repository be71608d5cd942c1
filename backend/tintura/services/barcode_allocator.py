"""
Barcode Allocator

Allocates per-order sequential barcode serials:

    <order_no>;<style>;<size>;<NNNNN>

The counter lives on the order (last_barcode_serial) and only grows. It is
advanced with a compare-and-swap update keyed on the value that was read,
in the same transaction that inserts the barcodes, so two concurrent
batches can never hand out the same serial and a failed insert never
leaves a gap.
"""
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tintura.core.settings import settings
from tintura.core.status_config import (
    BarcodeStatus,
    get_next_barcode_status,
    required_barcode_flow,
)
from tintura.db.repository import Repository, commit_or_rollback
from tintura.exceptions import ConcurrencyError, InvalidStateError, NotFoundError, ValidationError
from tintura.logging_config import get_logger
from tintura.models import Barcode, Order
from tintura.services.receipts import ReceiptPayload, barcode_batch_receipt

logger = get_logger(__name__)

SERIAL_SEPARATOR = ";"


@dataclass
class BarcodeBatch:
    order: Order
    barcodes: List[Barcode]
    receipt: ReceiptPayload


def format_serial(order_no: str, style: str, size: str, counter: int, width: Optional[int] = None) -> str:
    width = width or settings.BARCODE_SERIAL_WIDTH
    return SERIAL_SEPARATOR.join([order_no, style, size, f"{counter:0{width}d}"])


def _clean_segment(value: Optional[str], field_name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field_name} is required", field=field_name)
    if SERIAL_SEPARATOR in value:
        raise ValidationError(
            f"{field_name} may not contain '{SERIAL_SEPARATOR}'", field=field_name, value=value
        )
    return value


def generate_barcodes(
    db: Session,
    order_id: int,
    count: int,
    size: str,
    style: Optional[str] = None,
) -> BarcodeBatch:
    """
    Generate `count` new barcodes for an order.

    Raises:
        NotFoundError: Unknown order
        ValidationError: Bad count, style or size
        ConcurrencyError: Counter kept moving under us for every retry
    """
    max_batch = settings.MAX_BARCODE_BATCH
    if count is None or count < 1 or count > max_batch:
        raise ValidationError(f"Count must be between 1 and {max_batch}", field="count", value=count)

    order = db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order", order_id)
    style = _clean_segment(style if style is not None else order.style_number, "style")
    size = _clean_segment(size, "size")

    orders = Repository(db, Order)
    barcodes_repo = Repository(db, Barcode)

    for attempt in range(1, settings.SERIAL_CAS_RETRIES + 1):
        db.refresh(order)
        start = order.last_barcode_serial or 0
        end = start + count

        swapped = orders.update_where(
            {"id": order.id, "last_barcode_serial": start},
            {"last_barcode_serial": end},
        )
        if swapped != 1:
            db.rollback()
            logger.warning(
                f"Serial counter for {order.order_no} moved during allocation, retrying",
                extra={"attempt": attempt, "expected": start},
            )
            continue

        barcodes = [
            Barcode(
                barcode_serial=format_serial(order.order_no, style, size, n),
                order_id=order.id,
                style_number=style,
                size=size,
                status=BarcodeStatus.GENERATED.value,
            )
            for n in range(start + 1, end + 1)
        ]
        try:
            barcodes_repo.insert_many(barcodes)
        except IntegrityError:
            # A serial already exists (counter was behind the table); nothing is kept
            db.rollback()
            logger.warning(
                f"Serial collision for {order.order_no}, retrying",
                extra={"attempt": attempt, "start": start},
            )
            continue

        commit_or_rollback(db, f"barcode generation for {order.order_no}")
        db.refresh(order)
        for bc in barcodes:
            db.refresh(bc)

        logger.info(
            f"Generated {count} barcode(s) for {order.order_no}",
            extra={"first": barcodes[0].barcode_serial, "last": barcodes[-1].barcode_serial},
        )
        return BarcodeBatch(order=order, barcodes=barcodes, receipt=barcode_batch_receipt(order, barcodes))

    raise ConcurrencyError(
        f"Could not allocate serials for {order.order_no}; please retry",
        details={"order_id": order.id, "attempts": settings.SERIAL_CAS_RETRIES},
    )


def list_barcodes(
    db: Session,
    order_id: Optional[int] = None,
    status: Optional[List[str]] = None,
    serials: Optional[List[str]] = None,
) -> List[Barcode]:
    filters = {}
    if order_id is not None:
        filters["order_id"] = order_id
    if status:
        filters["status"] = status
    if serials:
        filters["barcode_serial"] = serials
    return Repository(db, Barcode).fetch_all(order_by=Barcode.id, **filters)


def get_barcode_by_serial(db: Session, serial: str) -> Barcode:
    barcode = Repository(db, Barcode).fetch_first(barcode_serial=serial)
    if not barcode:
        raise NotFoundError("Barcode", serial)
    return barcode


def advance_barcode(db: Session, barcode_id: int) -> Barcode:
    """
    Move a barcode one step along its production chain.

    Stops at QC_APPROVED: stock commit and checkout own the later steps.
    """
    barcode = db.get(Barcode, barcode_id)
    if not barcode:
        raise NotFoundError("Barcode", barcode_id)

    next_status = get_next_barcode_status(barcode.status)
    if next_status is None:
        raise InvalidStateError(
            f"Barcode {barcode.barcode_serial} is in terminal status {barcode.status}",
            current_state=barcode.status,
        )
    owner = required_barcode_flow(barcode.status, next_status)
    if owner is not None:
        raise InvalidStateError(
            f"Transition '{barcode.status}' → '{next_status.value}' requires the "
            f"{owner.replace('_', ' ')} flow",
            current_state=barcode.status,
        )

    old_status = barcode.status
    swapped = Repository(db, Barcode).update_where(
        {"id": barcode.id, "status": old_status},
        {"status": next_status.value},
    )
    if swapped != 1:
        db.rollback()
        raise ConcurrencyError(f"Barcode {barcode.barcode_serial} was changed by another user")
    commit_or_rollback(db, f"status change of barcode {barcode.barcode_serial}")
    db.refresh(barcode)

    logger.info(f"Barcode {barcode.barcode_serial}: {old_status} → {barcode.status}")
    return barcode
