"""
Barcode API Endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tintura.db.session import get_db
from tintura.schemas.barcode import BarcodeBatchResponse, BarcodeGenerateRequest, BarcodeResponse
from tintura.services import barcode_allocator

router = APIRouter()


@router.post(
    "/generate",
    response_model=BarcodeBatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a batch of barcodes for an order",
)
def generate_barcodes(request: BarcodeGenerateRequest, db: Session = Depends(get_db)):
    """
    Allocate `count` consecutive serials on the order's counter.

    Returns the new barcodes and a label receipt.
    """
    batch = barcode_allocator.generate_barcodes(
        db,
        order_id=request.order_id,
        count=request.count,
        size=request.size,
        style=request.style,
    )
    return BarcodeBatchResponse(
        order_id=batch.order.id,
        order_no=batch.order.order_no,
        last_barcode_serial=batch.order.last_barcode_serial,
        barcodes=[BarcodeResponse.model_validate(bc) for bc in batch.barcodes],
        receipt=batch.receipt.to_dict(),
    )


@router.get("/", response_model=List[BarcodeResponse], summary="List barcodes")
def list_barcodes(
    order_id: Optional[int] = Query(None),
    status_filter: Optional[List[str]] = Query(None, alias="status"),
    serial: Optional[List[str]] = Query(None),
    db: Session = Depends(get_db),
):
    return barcode_allocator.list_barcodes(db, order_id=order_id, status=status_filter, serials=serial)


@router.get("/by-serial/{serial}", response_model=BarcodeResponse, summary="Look up a barcode by serial")
def get_by_serial(serial: str, db: Session = Depends(get_db)):
    return barcode_allocator.get_barcode_by_serial(db, serial)


@router.post("/{barcode_id}/advance", response_model=BarcodeResponse, summary="Advance a barcode one step")
def advance_barcode(barcode_id: int, db: Session = Depends(get_db)):
    """Production steps only; stock commit and checkout own the later statuses."""
    return barcode_allocator.advance_barcode(db, barcode_id)
