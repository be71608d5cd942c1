"""
Tests for barcode endpoints
"""
import pytest

from tests.factories import create_test_barcode, create_test_order


class TestGenerate:
    """Tests for POST /api/v1/barcodes/generate"""

    @pytest.mark.api
    def test_generate_batch(self, client, db):
        order = create_test_order(db, order_no="ORD-7", style_number="X")
        db.commit()

        response = client.post(
            "/api/v1/barcodes/generate", json={"order_id": order.id, "count": 3, "size": "M"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["last_barcode_serial"] == 3
        assert [bc["barcode_serial"] for bc in data["barcodes"]] == [
            "ORD-7;X;M;00001",
            "ORD-7;X;M;00002",
            "ORD-7;X;M;00003",
        ]
        assert data["receipt"]["title"] == "Barcode Labels"
        assert data["receipt"]["reference"] == "ORD-7 (00001-00003)"

    @pytest.mark.api
    def test_second_batch_continues(self, client, db):
        order = create_test_order(db, order_no="ORD-8", style_number="X")
        db.commit()

        client.post("/api/v1/barcodes/generate", json={"order_id": order.id, "count": 2, "size": "S"})
        response = client.post("/api/v1/barcodes/generate", json={"order_id": order.id, "count": 1, "size": "L"})

        assert response.json()["barcodes"][0]["barcode_serial"] == "ORD-8;X;L;00003"

    @pytest.mark.api
    def test_zero_count(self, client, db):
        order = create_test_order(db)
        db.commit()

        response = client.post("/api/v1/barcodes/generate", json={"order_id": order.id, "count": 0, "size": "M"})

        assert response.status_code == 422

    @pytest.mark.api
    def test_batch_too_large(self, client, db):
        order = create_test_order(db)
        db.commit()

        response = client.post(
            "/api/v1/barcodes/generate", json={"order_id": order.id, "count": 5000, "size": "M"}
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "count"

    @pytest.mark.api
    def test_unknown_order(self, client):
        response = client.post("/api/v1/barcodes/generate", json={"order_id": 42, "count": 1, "size": "M"})
        assert response.status_code == 404


class TestLookupAndAdvance:

    @pytest.mark.api
    def test_list_by_order_and_status(self, client, db):
        order = create_test_order(db)
        create_test_barcode(db, order=order, status="GENERATED")
        create_test_barcode(db, order=order, status="QC_APPROVED")
        create_test_barcode(db, status="GENERATED")
        db.commit()

        response = client.get("/api/v1/barcodes/", params={"order_id": order.id, "status": "GENERATED"})

        assert response.status_code == 200
        assert len(response.json()) == 1

    @pytest.mark.api
    def test_by_serial(self, client, db):
        barcode = create_test_barcode(db, serial="ORD-1;X;M;00001")
        db.commit()

        response = client.get("/api/v1/barcodes/by-serial/ORD-1;X;M;00001")

        assert response.status_code == 200
        assert response.json()["id"] == barcode.id

    @pytest.mark.api
    def test_unknown_serial(self, client):
        assert client.get("/api/v1/barcodes/by-serial/NOPE").status_code == 404

    @pytest.mark.api
    def test_advance_production_steps(self, client, db):
        barcode = create_test_barcode(db, status="GENERATED")
        db.commit()

        for expected in ["DETAILS_FILLED", "PUSHED_OUT_OF_SUBUNIT", "QC_APPROVED"]:
            response = client.post(f"/api/v1/barcodes/{barcode.id}/advance")
            assert response.status_code == 200
            assert response.json()["status"] == expected

    @pytest.mark.api
    def test_advance_cannot_commit_to_stock(self, client, db):
        barcode = create_test_barcode(db, status="QC_APPROVED")
        db.commit()

        response = client.post(f"/api/v1/barcodes/{barcode.id}/advance")

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_STATE"
