"""Checkout and invoice schemas."""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from tintura.schemas.barcode import BarcodeResponse
from tintura.schemas.receipt import ReceiptResponse


class CheckoutRequest(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=200)
    barcode_ids: List[int] = Field(..., min_length=1)
    invoice_no: Optional[str] = Field(None, max_length=50)


class InvoiceResponse(BaseModel):
    id: int
    invoice_no: str
    customer_name: str
    total_amount: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class CheckoutResponse(BaseModel):
    invoice: InvoiceResponse
    items: List[BarcodeResponse]
    receipt: ReceiptResponse
