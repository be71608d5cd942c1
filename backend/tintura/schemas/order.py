"""
Order schemas: issuance, details, lifecycle actions and the timeline.
"""
from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from tintura.core.status_config import SizeFormat


class SizeBreakdownRow(BaseModel):
    """One color row of the size matrix."""
    color: str = Field(..., min_length=1, max_length=100)
    s: int = Field(0, ge=0)
    m: int = Field(0, ge=0)
    l: int = Field(0, ge=0)  # noqa: E741
    xl: int = Field(0, ge=0)
    xxl: int = Field(0, ge=0)
    xxxl: int = Field(0, ge=0)

    @field_validator("color")
    @classmethod
    def strip_color(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("color must not be blank")
        return v


class OrderCreate(BaseModel):
    """Admin issues an order to a unit."""
    unit_id: int
    style_number: str = Field(..., min_length=1, max_length=100)
    size_breakdown: List[SizeBreakdownRow] = Field(..., min_length=1)
    box_count: Optional[int] = Field(None, ge=0)
    target_delivery_date: Optional[date] = None
    description: Optional[str] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    attachment_name: Optional[str] = Field(None, max_length=255)
    size_format: SizeFormat = SizeFormat.STANDARD
    created_by: Optional[str] = Field(None, max_length=100)


class OrderUpdate(BaseModel):
    """Editable details; quantities stay as issued."""
    description: Optional[str] = None
    target_delivery_date: Optional[date] = None
    box_count: Optional[int] = Field(None, ge=0)
    attachment_url: Optional[str] = Field(None, max_length=500)
    attachment_name: Optional[str] = Field(None, max_length=255)
    size_format: Optional[SizeFormat] = None
    updated_by: Optional[str] = Field(None, max_length=100)


class OrderResponse(BaseModel):
    id: int
    order_no: str
    unit_id: int
    style_number: str
    quantity: int
    box_count: Optional[int] = None
    actual_box_count: Optional[int] = None
    last_barcode_serial: int
    size_breakdown: Optional[List[Dict]] = None
    completion_breakdown: Optional[List[Dict]] = None
    size_format: str
    description: Optional[str] = None
    qc_notes: Optional[str] = None
    qc_attachment_url: Optional[str] = None
    attachment_url: Optional[str] = None
    attachment_name: Optional[str] = None
    target_delivery_date: Optional[date] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdvanceRequest(BaseModel):
    actor: Optional[str] = Field(None, max_length=100)


class QCDecisionRequest(BaseModel):
    """QC station verdict."""
    accept: bool
    note: Optional[str] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    actor: Optional[str] = Field(None, max_length=100)


class CompletionRequest(BaseModel):
    """Actual produced matrix, entered when the order is closed."""
    completion_breakdown: List[SizeBreakdownRow] = Field(..., min_length=1)
    actual_box_count: int = Field(..., ge=0)
    actor: Optional[str] = Field(None, max_length=100)


class ProgressNoteRequest(BaseModel):
    message: str = Field(..., min_length=1)
    actor: Optional[str] = Field(None, max_length=100)


class OrderLogResponse(BaseModel):
    id: int
    order_id: int
    log_type: str
    message: str
    created_by_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CellComparisonResponse(BaseModel):
    planned: int
    actual: Optional[int] = None
    mismatch: bool = False


class RowComparisonResponse(BaseModel):
    color: str
    cells: Dict[str, CellComparisonResponse]
    total: CellComparisonResponse
    has_actual: bool
    mismatched_sizes: List[str] = []


class OrderBreakdownResponse(BaseModel):
    """Planned vs. actual grid for the order detail view."""
    order_id: int
    order_no: str
    status: str
    size_labels: Dict[str, str]
    rows: List[RowComparisonResponse]
