"""
Checkout / Invoicing Service

Sells barcodes out of stock. The invoice row and the COMMITTED_TO_STOCK →
SOLD transition of every line are one transaction; the transition is a
conditional update, so a barcode sold by a parallel checkout makes this
one fail instead of selling the unit twice.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tintura.core.settings import settings
from tintura.core.status_config import BarcodeStatus
from tintura.db.repository import Repository, commit_or_rollback
from tintura.exceptions import (
    ConcurrencyError,
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tintura.logging_config import get_logger
from tintura.models import Barcode, Invoice
from tintura.services.receipts import ReceiptPayload, invoice_receipt

logger = get_logger(__name__)


@dataclass
class CheckoutResult:
    invoice: Invoice
    barcodes: List[Barcode]
    receipt: ReceiptPayload


def generate_invoice_no(now: Optional[datetime] = None) -> str:
    """INV-<epoch milliseconds>"""
    now = now or datetime.utcnow()
    millis = int((now - datetime(1970, 1, 1)).total_seconds() * 1000)
    return f"{settings.INVOICE_NO_PREFIX}{millis}"


def finalize_invoice(
    db: Session,
    customer_name: str,
    barcode_ids: List[int],
    invoice_no: Optional[str] = None,
) -> CheckoutResult:
    """
    Create an invoice for a cart of in-stock barcodes.

    Raises:
        ValidationError: empty cart, repeated barcode, blank customer
        NotFoundError: a barcode id does not exist
        InvalidStateError: a barcode is not in stock
        DuplicateError: invoice number already used
        ConcurrencyError: a barcode left stock while this checkout ran
    """
    customer_name = (customer_name or "").strip()
    if not customer_name:
        raise ValidationError("Customer name is required", field="customer_name")
    if not barcode_ids:
        raise ValidationError("Cart is empty", field="barcode_ids")
    if len(set(barcode_ids)) != len(barcode_ids):
        raise ValidationError("Cart contains the same barcode more than once", field="barcode_ids")

    barcodes_repo = Repository(db, Barcode)
    barcodes = barcodes_repo.fetch_all(order_by=Barcode.id, id=list(barcode_ids))
    found = {bc.id for bc in barcodes}
    missing = [bid for bid in barcode_ids if bid not in found]
    if missing:
        raise NotFoundError("Barcode", missing[0], details={"missing_ids": missing})

    not_in_stock = [bc.barcode_serial for bc in barcodes if bc.status != BarcodeStatus.COMMITTED_TO_STOCK]
    if not_in_stock:
        raise InvalidStateError(
            f"{len(not_in_stock)} barcode(s) are not in stock",
            current_state=", ".join(not_in_stock),
            allowed_states=[BarcodeStatus.COMMITTED_TO_STOCK.value],
        )

    invoice_no = (invoice_no or "").strip() or generate_invoice_no()
    if Repository(db, Invoice).fetch_first(invoice_no=invoice_no):
        raise DuplicateError("Invoice", field="invoice_no", value=invoice_no)

    unit_price = settings.unit_price
    total = unit_price * len(barcodes)

    try:
        invoice = Repository(db, Invoice).insert(
            Invoice(
                invoice_no=invoice_no,
                customer_name=customer_name,
                total_amount=total,
                created_at=datetime.utcnow(),
            )
        )
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError("Invoice", field="invoice_no", value=invoice_no) from e

    sold = barcodes_repo.update_where(
        {"id": list(barcode_ids), "status": BarcodeStatus.COMMITTED_TO_STOCK.value},
        {"status": BarcodeStatus.SOLD.value, "invoice_id": invoice.id},
    )
    if sold != len(barcode_ids):
        db.rollback()
        logger.warning(
            f"Checkout {invoice_no} aborted: {sold}/{len(barcode_ids)} barcodes still in stock"
        )
        raise ConcurrencyError(
            "Some barcodes were sold by another checkout; refresh the cart and retry",
            details={"expected": len(barcode_ids), "updated": sold},
        )

    commit_or_rollback(db, f"checkout {invoice_no}")
    db.refresh(invoice)
    sold_barcodes = barcodes_repo.fetch_all(order_by=Barcode.id, invoice_id=invoice.id)

    logger.info(
        f"Invoice {invoice.invoice_no}: {len(sold_barcodes)} item(s)",
        extra={"customer": customer_name, "total": str(total)},
    )
    return CheckoutResult(
        invoice=invoice,
        barcodes=sold_barcodes,
        receipt=invoice_receipt(invoice, sold_barcodes, unit_price),
    )


def list_invoices(db: Session) -> List[Invoice]:
    return db.query(Invoice).order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()


def get_invoice(db: Session, invoice_id: int) -> Invoice:
    invoice = db.get(Invoice, invoice_id)
    if not invoice:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


def invoice_items(db: Session, invoice_id: int) -> List[Barcode]:
    get_invoice(db, invoice_id)
    return Repository(db, Barcode).fetch_all(order_by=Barcode.id, invoice_id=invoice_id)


def get_invoice_receipt(db: Session, invoice_id: int) -> ReceiptPayload:
    invoice = get_invoice(db, invoice_id)
    return invoice_receipt(invoice, invoice_items(db, invoice_id), settings.unit_price)
