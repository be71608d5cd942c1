"""
Receipt payloads

Structured print payloads for barcode batches, stock commits, material
approvals and invoices. Rendering (HTML, labels, thermal printers) is up
to the client; these only carry what goes on the paper.
"""
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional


@dataclass
class ReceiptLine:
    description: str
    quantity: Decimal
    unit_price: Optional[Decimal] = None
    amount: Optional[Decimal] = None


@dataclass
class ReceiptPayload:
    title: str
    reference: str
    timestamp: datetime
    lines: List[ReceiptLine] = field(default_factory=list)
    total: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _style_size_lines(barcodes: Iterable[Any], unit_price: Optional[Decimal] = None) -> List[ReceiptLine]:
    """One line per style/size, in first-seen order"""
    counts: "OrderedDict[tuple, int]" = OrderedDict()
    for bc in barcodes:
        key = (bc.style_number, bc.size)
        counts[key] = counts.get(key, 0) + 1

    lines = []
    for (style, size), count in counts.items():
        line = ReceiptLine(description=f"{style} / {size}", quantity=Decimal(count))
        if unit_price is not None:
            line.unit_price = unit_price
            line.amount = unit_price * count
        lines.append(line)
    return lines


def barcode_batch_receipt(order, barcodes: List[Any], timestamp: Optional[datetime] = None) -> ReceiptPayload:
    serials = [bc.barcode_serial for bc in barcodes]
    reference = order.order_no
    if serials:
        reference = f"{order.order_no} ({serials[0].rsplit(';', 1)[-1]}-{serials[-1].rsplit(';', 1)[-1]})"
    return ReceiptPayload(
        title="Barcode Labels",
        reference=reference,
        timestamp=timestamp or datetime.utcnow(),
        lines=_style_size_lines(barcodes),
        total=Decimal(len(barcodes)),
    )


def stock_commit_receipt(commit, barcodes: List[Any]) -> ReceiptPayload:
    return ReceiptPayload(
        title="Stock Commit",
        reference=f"COMMIT-{commit.id}",
        timestamp=commit.created_at or datetime.utcnow(),
        lines=_style_size_lines(barcodes),
        total=Decimal(commit.total_items),
    )


def material_approval_receipt(request, approval) -> ReceiptPayload:
    qty = Decimal(approval.qty_approved)
    return ReceiptPayload(
        title="Material Issue Slip",
        reference=f"MR-{request.id}",
        timestamp=approval.created_at or datetime.utcnow(),
        lines=[ReceiptLine(description=f"{request.material_content} ({request.unit})", quantity=qty)],
        total=qty,
    )


def invoice_receipt(invoice, barcodes: List[Any], unit_price: Decimal) -> ReceiptPayload:
    return ReceiptPayload(
        title="Tax Invoice",
        reference=invoice.invoice_no,
        timestamp=invoice.created_at or datetime.utcnow(),
        lines=_style_size_lines(barcodes, unit_price=unit_price),
        total=Decimal(invoice.total_amount),
    )
