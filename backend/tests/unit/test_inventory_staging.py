"""
Tests for scan classification and the stock commit engine.
"""
import pytest
from sqlalchemy.exc import OperationalError

from tintura.core.status_config import StagingDisposition
from tintura.db.repository import Repository
from tintura.exceptions import NotFoundError, PersistenceError, ValidationError
from tintura.models import Barcode, StockCommit
from tintura.services.inventory_staging import (
    ScanSessionRegistry,
    StagingList,
    commit_receipt,
    commit_staged,
    current_stock,
    list_commits,
)
from tests.factories import create_test_barcode, create_test_order


class TestScanClassification:

    @pytest.mark.unit
    def test_same_serial_twice_is_ready_then_duplicate(self, db):
        barcode = create_test_barcode(db, status="QC_APPROVED")
        db.commit()
        staging = StagingList("s1")

        first = staging.scan(db, barcode.barcode_serial)
        second = staging.scan(db, barcode.barcode_serial)

        assert first.disposition == StagingDisposition.READY
        assert first.message == "Ready to add"
        assert second.disposition == StagingDisposition.DUPLICATE_SCAN
        assert second.message == "Already in list below"

    @pytest.mark.unit
    def test_unknown_serial_is_error(self, db):
        item = StagingList("s1").scan(db, "NOPE;X;M;00001")
        assert item.disposition == StagingDisposition.ERROR
        assert item.message == "Barcode not found in system"

    @pytest.mark.unit
    @pytest.mark.parametrize("status", ["COMMITTED_TO_STOCK", "SOLD"])
    def test_stocked_or_sold_is_exists(self, db, status):
        barcode = create_test_barcode(db, status=status)
        db.commit()

        item = StagingList("s1").scan(db, barcode.barcode_serial)

        assert item.disposition == StagingDisposition.EXISTS
        assert item.message == "Already in inventory/Sold"

    @pytest.mark.unit
    def test_any_earlier_status_is_ready(self, db):
        barcode = create_test_barcode(db, status="GENERATED")
        db.commit()
        assert StagingList("s1").scan(db, barcode.barcode_serial).disposition == StagingDisposition.READY

    @pytest.mark.unit
    def test_newest_scan_first(self, db):
        order = create_test_order(db)
        a = create_test_barcode(db, order=order)
        b = create_test_barcode(db, order=order)
        db.commit()
        staging = StagingList("s1")

        staging.scan(db, a.barcode_serial)
        staging.scan(db, b.barcode_serial)

        assert [item.serial for item in staging.items] == [b.barcode_serial, a.barcode_serial]

    @pytest.mark.unit
    def test_remove_drops_every_entry_for_serial(self, db):
        barcode = create_test_barcode(db)
        db.commit()
        staging = StagingList("s1")
        staging.scan(db, barcode.barcode_serial)
        staging.scan(db, barcode.barcode_serial)

        assert staging.remove(barcode.barcode_serial) == 2
        assert staging.items == []

    @pytest.mark.unit
    def test_blank_scan_rejected(self, db):
        with pytest.raises(ValidationError):
            StagingList("s1").scan(db, "   ")


class TestCommitStaged:

    @pytest.mark.unit
    def test_commit_moves_ready_items(self, db):
        order = create_test_order(db)
        ready = [create_test_barcode(db, order=order) for _ in range(3)]
        stocked = create_test_barcode(db, order=order, status="COMMITTED_TO_STOCK")
        db.commit()
        staging = StagingList("s1")
        for bc in ready:
            staging.scan(db, bc.barcode_serial)
        staging.scan(db, ready[0].barcode_serial)  # duplicate
        staging.scan(db, stocked.barcode_serial)
        staging.scan(db, "MISSING;X;M;00001")

        report = commit_staged(db, staging, note="Shelf A")

        assert sorted(report.success) == sorted(bc.barcode_serial for bc in ready)
        assert report.commit is not None
        assert report.commit.total_items == 3
        assert report.commit.note == "Shelf A"
        assert {item.disposition for item in report.skipped} == {
            StagingDisposition.DUPLICATE_SCAN, StagingDisposition.EXISTS
        }
        assert [item.serial for item in report.errors] == ["MISSING;X;M;00001"]
        assert staging.items == []

        for bc in ready:
            db.refresh(bc)
            assert bc.status == "COMMITTED_TO_STOCK"
            assert bc.commit_id == report.commit.id

    @pytest.mark.unit
    def test_nothing_ready_creates_no_commit(self, db):
        staging = StagingList("s1")
        staging.scan(db, "MISSING;X;M;00001")

        report = commit_staged(db, staging)

        assert report.commit is None
        assert len(report.errors) == 1
        assert db.query(StockCommit).count() == 0
        assert staging.items == []

    @pytest.mark.unit
    def test_item_committed_elsewhere_is_skipped(self, db):
        order = create_test_order(db)
        a = create_test_barcode(db, order=order)
        b = create_test_barcode(db, order=order)
        db.commit()
        staging = StagingList("s1")
        staging.scan(db, a.barcode_serial)
        staging.scan(db, b.barcode_serial)

        # Another session commits `a` after it was scanned here
        other = StagingList("s2")
        other.scan(db, a.barcode_serial)
        commit_staged(db, other)

        report = commit_staged(db, staging)

        assert report.success == [b.barcode_serial]
        assert report.commit.total_items == 1
        assert [item.serial for item in report.skipped] == [a.barcode_serial]
        assert report.skipped[0].message == "Already in inventory/Sold"

    @pytest.mark.unit
    def test_store_failure_keeps_list(self, db, monkeypatch):
        barcode = create_test_barcode(db)
        db.commit()
        staging = StagingList("s1")
        staging.scan(db, barcode.barcode_serial)

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("connection lost"))

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(PersistenceError) as exc:
            commit_staged(db, staging)

        assert exc.value.details["retryable"] is True
        assert len(staging.items) == 1
        monkeypatch.undo()
        db.refresh(barcode)
        assert barcode.status == "QC_APPROVED"
        assert db.query(StockCommit).count() == 0


    @pytest.mark.unit
    def test_scan_during_commit_stays_staged(self, db, monkeypatch):
        order = create_test_order(db)
        first = create_test_barcode(db, order=order)
        late = create_test_barcode(db, order=order)
        db.commit()
        staging = StagingList("s1")
        staging.scan(db, first.barcode_serial)

        original = Repository.update_where_not

        def scan_then_update(self, filters, excluded, values):
            # The operator keeps scanning while the commit is in flight
            staging.scan(db, late.barcode_serial)
            return original(self, filters, excluded, values)

        monkeypatch.setattr(Repository, "update_where_not", scan_then_update)
        report = commit_staged(db, staging)
        monkeypatch.undo()

        assert report.success == [first.barcode_serial]
        assert [(item.serial, item.disposition) for item in staging.items] == [
            (late.barcode_serial, StagingDisposition.READY)
        ]

        follow_up = commit_staged(db, staging)

        assert follow_up.success == [late.barcode_serial]
        db.refresh(late)
        assert late.status == "COMMITTED_TO_STOCK"
        assert staging.items == []

    @pytest.mark.unit
    def test_store_failure_keeps_newer_scans_first(self, db, monkeypatch):
        order = create_test_order(db)
        first = create_test_barcode(db, order=order)
        late = create_test_barcode(db, order=order)
        db.commit()
        staging = StagingList("s1")
        staging.scan(db, first.barcode_serial)

        def scan_then_fail():
            staging.scan(db, late.barcode_serial)
            raise OperationalError("COMMIT", {}, Exception("connection lost"))

        monkeypatch.setattr(db, "commit", scan_then_fail)
        with pytest.raises(PersistenceError):
            commit_staged(db, staging)
        monkeypatch.undo()

        assert [item.serial for item in staging.items] == [late.barcode_serial, first.barcode_serial]


class TestStockViews:

    @pytest.mark.unit
    def test_history_stock_and_receipt(self, db):
        order = create_test_order(db, style_number="ST-9")
        barcodes = [create_test_barcode(db, order=order, size="M") for _ in range(2)]
        barcodes.append(create_test_barcode(db, order=order, size="L"))
        db.commit()
        staging = StagingList("s1")
        for bc in barcodes:
            staging.scan(db, bc.barcode_serial)
        report = commit_staged(db, staging)

        assert [c.id for c in list_commits(db)] == [report.commit.id]
        assert len(current_stock(db)) == 3

        receipt = commit_receipt(db, report.commit.id)
        assert receipt.reference == f"COMMIT-{report.commit.id}"
        assert receipt.total == 3
        assert {(line.description, line.quantity) for line in receipt.lines} == {
            ("ST-9 / M", 2), ("ST-9 / L", 1)
        }


class TestScanSessionRegistry:

    @pytest.mark.unit
    def test_create_get_discard(self):
        registry = ScanSessionRegistry()
        staging = registry.create()

        assert registry.get(staging.session_id) is staging

        registry.discard(staging.session_id)
        with pytest.raises(NotFoundError):
            registry.get(staging.session_id)

    @pytest.mark.unit
    def test_unknown_session(self):
        with pytest.raises(NotFoundError):
            ScanSessionRegistry().discard("missing")
