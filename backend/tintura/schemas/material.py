"""Material request schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from tintura.schemas.receipt import ReceiptResponse


class MaterialRequestCreate(BaseModel):
    order_id: int
    material_content: str = Field(..., min_length=1)
    quantity_requested: Decimal = Field(..., gt=0)
    unit: str = Field("Nos", max_length=20)
    attachment_url: Optional[str] = Field(None, max_length=500)
    requested_by: Optional[str] = Field(None, max_length=100)


class MaterialApproveRequest(BaseModel):
    """Quantity issued in this round (0 on an untouched request rejects it)."""
    additional_qty: Decimal = Field(..., ge=0)
    approved_by: Optional[str] = Field(None, max_length=100)


class MaterialRequestResponse(BaseModel):
    id: int
    order_id: int
    material_content: str
    quantity_requested: Decimal
    quantity_approved: Decimal
    unit: str
    attachment_url: Optional[str] = None
    requested_by_name: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class MaterialApprovalResponse(BaseModel):
    id: int
    request_id: int
    qty_approved: Decimal
    approved_by_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MaterialApprovalResult(BaseModel):
    request: MaterialRequestResponse
    approval: MaterialApprovalResponse
    receipt: Optional[ReceiptResponse] = None
