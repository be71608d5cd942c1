"""
Inventory Staging & Commit Engine

A scan session collects barcode serials from a handheld scanner into a
staging list, classifying each scan as it arrives:

    DUPLICATE_SCAN  already in this list (no store lookup)
    ERROR           serial unknown
    EXISTS          already COMMITTED_TO_STOCK or SOLD
    READY           will be committed

Committing moves every READY barcode to COMMITTED_TO_STOCK under one new
StockCommit, atomically. Staging lists are ephemeral and live in this
process only.
"""
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tintura.core.status_config import (
    BarcodeStatus,
    IN_STOCK_OR_SOLD,
    STAGING_MESSAGES,
    StagingDisposition,
)
from tintura.db.repository import Repository, commit_or_rollback
from tintura.exceptions import NotFoundError, PersistenceError, ValidationError
from tintura.logging_config import get_logger
from tintura.models import Barcode, StockCommit
from tintura.services.receipts import ReceiptPayload, stock_commit_receipt

logger = get_logger(__name__)


@dataclass
class StagedItem:
    serial: str
    disposition: StagingDisposition
    message: str
    barcode_id: Optional[int] = None
    style_number: Optional[str] = None
    size: Optional[str] = None
    scanned_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class CommitReport:
    success: List[str] = field(default_factory=list)
    skipped: List[StagedItem] = field(default_factory=list)
    errors: List[StagedItem] = field(default_factory=list)
    commit: Optional[StockCommit] = None


def classify_scan(db: Session, serial: str, staged_serials) -> StagedItem:
    """Classify one scanned serial against the list and the store"""
    if serial in staged_serials:
        return StagedItem(
            serial=serial,
            disposition=StagingDisposition.DUPLICATE_SCAN,
            message=STAGING_MESSAGES[StagingDisposition.DUPLICATE_SCAN],
        )

    barcode = Repository(db, Barcode).fetch_first(barcode_serial=serial)
    if barcode is None:
        disposition = StagingDisposition.ERROR
    elif barcode.status in IN_STOCK_OR_SOLD:
        disposition = StagingDisposition.EXISTS
    else:
        disposition = StagingDisposition.READY

    return StagedItem(
        serial=serial,
        disposition=disposition,
        message=STAGING_MESSAGES[disposition],
        barcode_id=barcode.id if barcode else None,
        style_number=barcode.style_number if barcode else None,
        size=barcode.size if barcode else None,
    )


def _unique_ready(items: List[StagedItem]) -> List[StagedItem]:
    seen = set()
    ready = []
    for item in items:
        if item.disposition == StagingDisposition.READY and item.serial not in seen:
            seen.add(item.serial)
            ready.append(item)
    return ready


class StagingList:
    """One operator's scan list; newest scan first"""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.created_at = datetime.utcnow()
        self._items: List[StagedItem] = []
        self._lock = threading.Lock()

    @property
    def items(self) -> List[StagedItem]:
        return list(self._items)

    def staged_serials(self) -> set:
        return {item.serial for item in self._items}

    def scan(self, db: Session, serial: str) -> StagedItem:
        serial = (serial or "").strip()
        if not serial:
            raise ValidationError("Scanned serial is empty", field="serial")
        with self._lock:
            item = classify_scan(db, serial, self.staged_serials())
            self._items.insert(0, item)
        return item

    def remove(self, serial: str) -> int:
        """Drop every entry for a serial; returns how many were removed"""
        with self._lock:
            before = len(self._items)
            self._items = [item for item in self._items if item.serial != serial]
            return before - len(self._items)

    def ready_items(self) -> List[StagedItem]:
        return _unique_ready(self.items)

    def drain(self) -> List[StagedItem]:
        """Take every staged item and empty the list in one step"""
        with self._lock:
            items, self._items = self._items, []
        return items

    def restore(self, items: List[StagedItem]) -> None:
        """Put drained items back behind anything scanned since"""
        with self._lock:
            self._items = self._items + list(items)


class ScanSessionRegistry:
    """In-process registry of staging lists, keyed by session id"""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, StagingList] = {}

    def create(self) -> StagingList:
        with self._lock:
            session_id = uuid.uuid4().hex
            staging = StagingList(session_id)
            self._sessions[session_id] = staging
        logger.info(f"Opened scan session {session_id}")
        return staging

    def get(self, session_id: str) -> StagingList:
        with self._lock:
            staging = self._sessions.get(session_id)
        if staging is None:
            raise NotFoundError("Scan session", session_id)
        return staging

    def discard(self, session_id: str) -> None:
        with self._lock:
            staging = self._sessions.pop(session_id, None)
        if staging is None:
            raise NotFoundError("Scan session", session_id)
        logger.info(f"Discarded scan session {session_id}")

    def clear_all(self) -> None:
        with self._lock:
            self._sessions.clear()


scan_sessions = ScanSessionRegistry()


def commit_staged(db: Session, staging: StagingList, note: Optional[str] = None) -> CommitReport:
    """
    Commit every READY item of a staging list to stock.

    The StockCommit row and the barcode updates are one transaction. A
    barcode that another session committed (or that was sold) since it was
    scanned is reported as skipped, and total_items counts only the
    barcodes this commit actually moved. With nothing READY, no commit
    record is written.

    The list is drained before the store is touched, so scans arriving
    during the commit stay staged for the next one. On a store failure
    the drained items are put back so the operator can retry.
    """
    items = staging.drain()
    try:
        return _commit_items(db, items, note)
    except (PersistenceError, SQLAlchemyError):
        db.rollback()
        staging.restore(items)
        raise


def _commit_items(db: Session, items: List[StagedItem], note: Optional[str]) -> CommitReport:
    report = CommitReport()
    ready = _unique_ready(items)
    for item in items:
        if item.disposition == StagingDisposition.ERROR:
            report.errors.append(item)
        elif item.disposition in (StagingDisposition.EXISTS, StagingDisposition.DUPLICATE_SCAN):
            report.skipped.append(item)

    if not ready:
        return report

    serials = [item.serial for item in ready]
    barcodes = Repository(db, Barcode)

    commit = Repository(db, StockCommit).insert(
        StockCommit(total_items=0, note=note, created_at=datetime.utcnow())
    )
    barcodes.update_where_not(
        {"barcode_serial": serials},
        {"status": list(IN_STOCK_OR_SOLD)},
        {"status": BarcodeStatus.COMMITTED_TO_STOCK.value, "commit_id": commit.id},
    )
    moved = {bc.barcode_serial for bc in barcodes.fetch_all(commit_id=commit.id)}
    commit.total_items = len(moved)

    for item in ready:
        if item.serial in moved:
            report.success.append(item.serial)
        else:
            report.skipped.append(
                StagedItem(
                    serial=item.serial,
                    disposition=StagingDisposition.EXISTS,
                    message=STAGING_MESSAGES[StagingDisposition.EXISTS],
                    barcode_id=item.barcode_id,
                    style_number=item.style_number,
                    size=item.size,
                )
            )

    if not moved:
        # Every READY item lost a race; keep no empty commit record
        db.rollback()
        logger.warning("Stock commit moved no barcodes", extra={"skipped": len(report.skipped)})
        return report

    commit_or_rollback(db, "stock commit")
    db.refresh(commit)
    report.commit = commit

    logger.info(
        f"Stock commit {commit.id}: {commit.total_items} item(s)",
        extra={"skipped": len(report.skipped), "errors": len(report.errors)},
    )
    return report


def list_commits(db: Session) -> List[StockCommit]:
    """Commit history, newest first"""
    return (
        db.query(StockCommit)
        .order_by(StockCommit.created_at.desc(), StockCommit.id.desc())
        .all()
    )


def get_commit(db: Session, commit_id: int) -> StockCommit:
    commit = db.get(StockCommit, commit_id)
    if not commit:
        raise NotFoundError("Stock commit", commit_id)
    return commit


def commit_barcodes(db: Session, commit_id: int) -> List[Barcode]:
    get_commit(db, commit_id)
    return Repository(db, Barcode).fetch_all(order_by=Barcode.id, commit_id=commit_id)


def commit_receipt(db: Session, commit_id: int) -> ReceiptPayload:
    commit = get_commit(db, commit_id)
    return stock_commit_receipt(commit, commit_barcodes(db, commit_id))


def current_stock(db: Session) -> List[Barcode]:
    """Barcodes sitting in stock, available for sale"""
    return Repository(db, Barcode).fetch_all(
        order_by=Barcode.id, status=BarcodeStatus.COMMITTED_TO_STOCK.value
    )
