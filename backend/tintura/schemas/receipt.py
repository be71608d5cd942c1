"""Print payload schemas."""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel


class ReceiptLineResponse(BaseModel):
    description: str
    quantity: Decimal
    unit_price: Optional[Decimal] = None
    amount: Optional[Decimal] = None

    class Config:
        from_attributes = True


class ReceiptResponse(BaseModel):
    """Structured receipt, rendered to paper by the client."""
    title: str
    reference: str
    timestamp: datetime
    lines: List[ReceiptLineResponse] = []
    total: Optional[Decimal] = None

    class Config:
        from_attributes = True
