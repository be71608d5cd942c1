"""
Tests for scan sessions and stock commits
"""
from urllib.parse import quote

import pytest

from tests.factories import create_test_barcode, create_test_order


def _open_session(client):
    response = client.post("/api/v1/inventory/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


def _scan(client, session_id, serial):
    return client.post(f"/api/v1/inventory/sessions/{session_id}/scan", json={"serial": serial})


class TestScanSession:

    @pytest.mark.api
    def test_scan_classification(self, client, db):
        order = create_test_order(db)
        ready = create_test_barcode(db, order=order, status="QC_APPROVED")
        stocked = create_test_barcode(db, order=order, status="COMMITTED_TO_STOCK")
        db.commit()
        session_id = _open_session(client)

        assert _scan(client, session_id, ready.barcode_serial).json()["disposition"] == "READY"
        assert _scan(client, session_id, ready.barcode_serial).json()["disposition"] == "DUPLICATE_SCAN"
        assert _scan(client, session_id, stocked.barcode_serial).json()["disposition"] == "EXISTS"
        assert _scan(client, session_id, "ORD-0;NOPE;M;00001").json()["disposition"] == "ERROR"

        listing = client.get(f"/api/v1/inventory/sessions/{session_id}").json()
        assert len(listing["items"]) == 4
        assert listing["items"][0]["disposition"] == "ERROR"
        assert listing["ready_count"] == 1

    @pytest.mark.api
    def test_remove_serial(self, client, db):
        barcode = create_test_barcode(db)
        db.commit()
        session_id = _open_session(client)
        _scan(client, session_id, barcode.barcode_serial)

        response = client.delete(
            f"/api/v1/inventory/sessions/{session_id}/items/{quote(barcode.barcode_serial, safe='')}"
        )

        assert response.status_code == 200
        assert response.json()["items"] == []

    @pytest.mark.api
    def test_unknown_session(self, client):
        response = client.post("/api/v1/inventory/sessions/missing/scan", json={"serial": "X"})
        assert response.status_code == 404

    @pytest.mark.api
    def test_discard(self, client):
        session_id = _open_session(client)

        assert client.delete(f"/api/v1/inventory/sessions/{session_id}").status_code == 200
        assert client.get(f"/api/v1/inventory/sessions/{session_id}").status_code == 404


class TestCommit:

    @pytest.mark.api
    def test_commit_ready_items(self, client, db):
        order = create_test_order(db)
        first = create_test_barcode(db, order=order)
        second = create_test_barcode(db, order=order)
        stocked = create_test_barcode(db, order=order, status="COMMITTED_TO_STOCK")
        db.commit()
        session_id = _open_session(client)
        for serial in [first.barcode_serial, second.barcode_serial, stocked.barcode_serial, "BAD"]:
            _scan(client, session_id, serial)

        response = client.post(f"/api/v1/inventory/sessions/{session_id}/commit", json={"note": "Rack 4"})

        assert response.status_code == 200
        report = response.json()
        assert sorted(report["success"]) == sorted([first.barcode_serial, second.barcode_serial])
        assert [item["serial"] for item in report["skipped"]] == [stocked.barcode_serial]
        assert [item["serial"] for item in report["errors"]] == ["BAD"]
        assert report["commit"]["total_items"] == 2
        assert report["commit"]["note"] == "Rack 4"

        # The staging list is emptied after a commit
        assert client.get(f"/api/v1/inventory/sessions/{session_id}").json()["items"] == []

        commit_id = report["commit"]["id"]
        items = client.get(f"/api/v1/inventory/commits/{commit_id}/barcodes").json()
        assert {bc["status"] for bc in items} == {"COMMITTED_TO_STOCK"}
        assert len(client.get("/api/v1/inventory/stock").json()) == 3

        receipt = client.get(f"/api/v1/inventory/commits/{commit_id}/receipt").json()
        assert receipt["reference"] == f"COMMIT-{commit_id}"

    @pytest.mark.api
    def test_nothing_ready_creates_no_commit(self, client, db):
        stocked = create_test_barcode(db, status="SOLD")
        db.commit()
        session_id = _open_session(client)
        _scan(client, session_id, stocked.barcode_serial)

        response = client.post(f"/api/v1/inventory/sessions/{session_id}/commit")

        assert response.status_code == 200
        assert response.json()["commit"] is None
        assert response.json()["success"] == []
        assert client.get("/api/v1/inventory/commits").json() == []

    @pytest.mark.api
    def test_unknown_commit(self, client):
        assert client.get("/api/v1/inventory/commits/99").status_code == 404
