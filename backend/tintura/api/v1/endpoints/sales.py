"""
Sales API Endpoints

Point-of-sale checkout and invoice history.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tintura.db.session import get_db
from tintura.schemas.barcode import BarcodeResponse
from tintura.schemas.receipt import ReceiptResponse
from tintura.schemas.sales import CheckoutRequest, CheckoutResponse, InvoiceResponse
from tintura.services import checkout_service

router = APIRouter()


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sell a cart of in-stock barcodes",
)
def checkout(request: CheckoutRequest, db: Session = Depends(get_db)):
    """
    Create an invoice and mark every barcode SOLD, atomically.

    Every barcode must be COMMITTED_TO_STOCK. Total is count × unit price.
    """
    result = checkout_service.finalize_invoice(
        db,
        customer_name=request.customer_name,
        barcode_ids=request.barcode_ids,
        invoice_no=request.invoice_no,
    )
    return CheckoutResponse(
        invoice=InvoiceResponse.model_validate(result.invoice),
        items=[BarcodeResponse.model_validate(bc) for bc in result.barcodes],
        receipt=result.receipt.to_dict(),
    )


@router.get("/invoices", response_model=List[InvoiceResponse], summary="Invoice history, newest first")
def list_invoices(db: Session = Depends(get_db)):
    return checkout_service.list_invoices(db)


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse, summary="Get an invoice")
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return checkout_service.get_invoice(db, invoice_id)


@router.get("/invoices/{invoice_id}/items", response_model=List[BarcodeResponse], summary="Barcodes sold on an invoice")
def invoice_items(invoice_id: int, db: Session = Depends(get_db)):
    return checkout_service.invoice_items(db, invoice_id)


@router.get("/invoices/{invoice_id}/receipt", response_model=ReceiptResponse, summary="Invoice receipt")
def invoice_receipt(invoice_id: int, db: Session = Depends(get_db)):
    return checkout_service.get_invoice_receipt(db, invoice_id).to_dict()
