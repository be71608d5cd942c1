"""
Tests for checkout and invoicing.
"""
import pytest
from datetime import datetime
from decimal import Decimal

from tintura.exceptions import (
    ConcurrencyError,
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tintura.models import Barcode, Invoice
from tintura.services import checkout_service
from tintura.services.checkout_service import (
    finalize_invoice,
    generate_invoice_no,
    get_invoice_receipt,
    invoice_items,
)
from tests.factories import create_test_barcode, create_test_order


def _stock(db, count=2, size="M", order=None):
    order = order or create_test_order(db, style_number="ST-1")
    barcodes = [create_test_barcode(db, order=order, size=size, status="COMMITTED_TO_STOCK") for _ in range(count)]
    db.commit()
    return barcodes


class TestFinalizeInvoice:

    @pytest.mark.unit
    def test_sells_cart(self, db):
        barcodes = _stock(db, count=3)

        result = finalize_invoice(db, "Acme Traders", [bc.id for bc in barcodes], invoice_no="INV-1")

        assert result.invoice.invoice_no == "INV-1"
        assert result.invoice.total_amount == Decimal("75.00")
        assert len(result.barcodes) == 3
        assert all(bc.status == "SOLD" and bc.invoice_id == result.invoice.id for bc in result.barcodes)

    @pytest.mark.unit
    def test_generated_invoice_number(self, db):
        barcodes = _stock(db, count=1)

        result = finalize_invoice(db, "Walk-in", [barcodes[0].id])

        assert result.invoice.invoice_no.startswith("INV-")
        assert result.invoice.invoice_no[4:].isdigit()

    @pytest.mark.unit
    def test_invoice_no_from_timestamp(self):
        assert generate_invoice_no(datetime(1970, 1, 1, 0, 0, 1)) == "INV-1000"

    @pytest.mark.unit
    def test_item_not_in_stock(self, db):
        order = create_test_order(db)
        in_stock = create_test_barcode(db, order=order, status="COMMITTED_TO_STOCK")
        not_yet = create_test_barcode(db, order=order, status="QC_APPROVED")
        db.commit()

        with pytest.raises(InvalidStateError):
            finalize_invoice(db, "Acme", [in_stock.id, not_yet.id])

        assert db.query(Invoice).count() == 0
        db.refresh(in_stock)
        assert in_stock.status == "COMMITTED_TO_STOCK"

    @pytest.mark.unit
    def test_unknown_barcode(self, db):
        barcodes = _stock(db, count=1)
        with pytest.raises(NotFoundError):
            finalize_invoice(db, "Acme", [barcodes[0].id, 9999])

    @pytest.mark.unit
    @pytest.mark.parametrize("customer,ids", [("", [1]), ("Acme", []), ("Acme", [1, 1])])
    def test_bad_cart(self, db, customer, ids):
        _stock(db, count=1)
        with pytest.raises(ValidationError):
            finalize_invoice(db, customer, ids)

    @pytest.mark.unit
    def test_duplicate_invoice_no(self, db):
        barcodes = _stock(db, count=2)
        finalize_invoice(db, "Acme", [barcodes[0].id], invoice_no="INV-7")

        with pytest.raises(DuplicateError):
            finalize_invoice(db, "Acme", [barcodes[1].id], invoice_no="INV-7")

    @pytest.mark.unit
    def test_lost_race_rolls_back(self, db, monkeypatch):
        barcodes = _stock(db, count=2)

        # Only one of two rows still matches the expected prior status
        monkeypatch.setattr(checkout_service.Repository, "update_where", lambda self, filters, values: 1)

        with pytest.raises(ConcurrencyError):
            finalize_invoice(db, "Acme", [bc.id for bc in barcodes], invoice_no="INV-9")

        monkeypatch.undo()
        assert db.query(Invoice).count() == 0
        assert db.query(Barcode).filter(Barcode.status == "SOLD").count() == 0


class TestInvoiceViews:

    @pytest.mark.unit
    def test_items_and_receipt(self, db):
        order = create_test_order(db, style_number="ST-1")
        m = _stock(db, count=2, size="M", order=order)
        l = _stock(db, count=1, size="L", order=order)  # noqa: E741
        result = finalize_invoice(db, "Acme", [bc.id for bc in m + l], invoice_no="INV-2")

        assert len(invoice_items(db, result.invoice.id)) == 3

        receipt = get_invoice_receipt(db, result.invoice.id)
        assert receipt.reference == "INV-2"
        assert receipt.total == Decimal("75.00")
        lines = {line.description: line for line in receipt.lines}
        assert lines["ST-1 / M"].quantity == 2
        assert lines["ST-1 / M"].unit_price == Decimal("25.00")
        assert lines["ST-1 / M"].amount == Decimal("50.00")
        assert lines["ST-1 / L"].amount == Decimal("25.00")
