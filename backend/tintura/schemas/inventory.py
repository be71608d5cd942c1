"""Scan session and stock commit schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class ScanRequest(BaseModel):
    serial: str = Field(..., min_length=1, max_length=200)


class StagedItemResponse(BaseModel):
    serial: str
    disposition: str
    message: str
    barcode_id: Optional[int] = None
    style_number: Optional[str] = None
    size: Optional[str] = None
    scanned_at: datetime

    class Config:
        from_attributes = True


class ScanSessionResponse(BaseModel):
    session_id: str
    created_at: datetime
    items: List[StagedItemResponse] = []
    ready_count: int = 0


class CommitRequest(BaseModel):
    note: Optional[str] = None


class StockCommitResponse(BaseModel):
    id: int
    total_items: int
    note: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CommitReportResponse(BaseModel):
    """Outcome of committing a staging list."""
    success: List[str] = []
    skipped: List[StagedItemResponse] = []
    errors: List[StagedItemResponse] = []
    commit: Optional[StockCommitResponse] = None
