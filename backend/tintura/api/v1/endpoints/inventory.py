"""
Inventory API Endpoints

Scan sessions (staging lists) and stock commits.

Flow:
    POST   /inventory/sessions                     open a scan session
    POST   /inventory/sessions/{id}/scan           classify a scanned serial
    DELETE /inventory/sessions/{id}/items/{serial} drop a staged serial
    POST   /inventory/sessions/{id}/commit         commit READY items to stock
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tintura.db.session import get_db
from tintura.schemas.barcode import BarcodeResponse
from tintura.schemas.common import MessageResponse
from tintura.schemas.inventory import (
    CommitReportResponse,
    CommitRequest,
    ScanRequest,
    ScanSessionResponse,
    StagedItemResponse,
    StockCommitResponse,
)
from tintura.schemas.receipt import ReceiptResponse
from tintura.services import inventory_staging
from tintura.services.inventory_staging import scan_sessions

router = APIRouter()


def _session_response(staging) -> ScanSessionResponse:
    items = staging.items
    return ScanSessionResponse(
        session_id=staging.session_id,
        created_at=staging.created_at,
        items=[StagedItemResponse.model_validate(item) for item in items],
        ready_count=len(staging.ready_items()),
    )


# ============================================================================
# SCAN SESSIONS
# ============================================================================

@router.post(
    "/sessions",
    response_model=ScanSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a scan session",
)
def open_session():
    return _session_response(scan_sessions.create())


@router.get("/sessions/{session_id}", response_model=ScanSessionResponse, summary="Get a staging list")
def get_session(session_id: str):
    return _session_response(scan_sessions.get(session_id))


@router.post("/sessions/{session_id}/scan", response_model=StagedItemResponse, summary="Scan a serial")
def scan(session_id: str, request: ScanRequest, db: Session = Depends(get_db)):
    """
    Classify and stage a scanned serial.

    An unknown serial is staged as ERROR, not rejected.
    """
    item = scan_sessions.get(session_id).scan(db, request.serial)
    return StagedItemResponse.model_validate(item)


@router.delete(
    "/sessions/{session_id}/items/{serial}",
    response_model=ScanSessionResponse,
    summary="Remove a serial from the staging list",
)
def remove_item(session_id: str, serial: str):
    staging = scan_sessions.get(session_id)
    staging.remove(serial)
    return _session_response(staging)


@router.post("/sessions/{session_id}/commit", response_model=CommitReportResponse, summary="Commit to stock")
def commit_session(session_id: str, request: Optional[CommitRequest] = None, db: Session = Depends(get_db)):
    staging = scan_sessions.get(session_id)
    report = inventory_staging.commit_staged(db, staging, note=request.note if request else None)
    return CommitReportResponse(
        success=report.success,
        skipped=[StagedItemResponse.model_validate(item) for item in report.skipped],
        errors=[StagedItemResponse.model_validate(item) for item in report.errors],
        commit=StockCommitResponse.model_validate(report.commit) if report.commit else None,
    )


@router.delete("/sessions/{session_id}", response_model=MessageResponse, summary="Discard a scan session")
def discard_session(session_id: str):
    scan_sessions.discard(session_id)
    return MessageResponse(message=f"Scan session {session_id} discarded")


# ============================================================================
# STOCK
# ============================================================================

@router.get("/stock", response_model=List[BarcodeResponse], summary="Barcodes currently in stock")
def current_stock(db: Session = Depends(get_db)):
    return inventory_staging.current_stock(db)


@router.get("/commits", response_model=List[StockCommitResponse], summary="Commit history, newest first")
def list_commits(db: Session = Depends(get_db)):
    return inventory_staging.list_commits(db)


@router.get("/commits/{commit_id}", response_model=StockCommitResponse, summary="Get a stock commit")
def get_commit(commit_id: int, db: Session = Depends(get_db)):
    return inventory_staging.get_commit(db, commit_id)


@router.get("/commits/{commit_id}/barcodes", response_model=List[BarcodeResponse], summary="Barcodes of a commit")
def commit_barcodes(commit_id: int, db: Session = Depends(get_db)):
    return inventory_staging.commit_barcodes(db, commit_id)


@router.get("/commits/{commit_id}/receipt", response_model=ReceiptResponse, summary="Stock commit receipt")
def commit_receipt(commit_id: int, db: Session = Depends(get_db)):
    return inventory_staging.commit_receipt(db, commit_id).to_dict()
