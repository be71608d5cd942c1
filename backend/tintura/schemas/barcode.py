"""Barcode schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from tintura.schemas.receipt import ReceiptResponse


class BarcodeGenerateRequest(BaseModel):
    """Generate a batch of labels for one order."""
    order_id: int
    count: int = Field(..., ge=1)
    size: str = Field(..., min_length=1, max_length=20)
    style: Optional[str] = Field(None, max_length=100, description="Defaults to the order's style")


class BarcodeResponse(BaseModel):
    id: int
    barcode_serial: str
    order_id: int
    style_number: str
    size: Optional[str] = None
    status: str
    commit_id: Optional[int] = None
    invoice_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BarcodeBatchResponse(BaseModel):
    order_id: int
    order_no: str
    last_barcode_serial: int
    barcodes: List[BarcodeResponse]
    receipt: ReceiptResponse
