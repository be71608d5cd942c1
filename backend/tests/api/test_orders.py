"""
Tests for order endpoints: issuance, lifecycle and detail views.
"""
import pytest

from tests.factories import breakdown_row, create_test_barcode, create_test_order, create_test_unit


def _create_order(client, unit_id, rows=None, **extra):
    payload = {
        "unit_id": unit_id,
        "style_number": "ST-500",
        "size_breakdown": rows or [breakdown_row("Red", s=10, m=20)],
        "box_count": 4,
        "target_delivery_date": "2030-01-31",
    }
    payload.update(extra)
    return client.post("/api/v1/orders/", json=payload)


class TestCreateOrder:
    """Tests for POST /api/v1/orders/"""

    @pytest.mark.api
    def test_create_order(self, client, db):
        unit = create_test_unit(db)
        db.commit()

        response = _create_order(client, unit.id)

        assert response.status_code == 201
        data = response.json()
        assert data["order_no"] == "ORD-10001"
        assert data["quantity"] == 30
        assert data["status"] == "ASSIGNED"
        assert data["last_barcode_serial"] == 0

    @pytest.mark.api
    def test_zero_quantity_rejected(self, client, db):
        unit = create_test_unit(db)
        db.commit()

        response = _create_order(client, unit.id, rows=[breakdown_row("Red")])

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.api
    def test_negative_cell_fails_request_validation(self, client, db):
        unit = create_test_unit(db)
        db.commit()

        response = _create_order(client, unit.id, rows=[breakdown_row("Red", s=-1)])

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.api
    def test_unknown_unit(self, client, db):
        response = _create_order(client, 999)
        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "Unit"


class TestOrderLifecycle:
    """The Red 10/20 order from issuance to completion"""

    @pytest.mark.api
    def test_full_lifecycle_with_mismatch(self, client, db):
        unit = create_test_unit(db)
        db.commit()
        order_id = _create_order(client, unit.id).json()["id"]

        for expected in ["STARTED", "QC", "QC_APPROVED"]:
            response = client.post(f"/api/v1/orders/{order_id}/advance", json={"actor": "Lead"})
            assert response.status_code == 200
            assert response.json()["status"] == expected

        # Generic advance cannot complete
        response = client.post(f"/api/v1/orders/{order_id}/advance")
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_STATE"

        response = client.post(
            f"/api/v1/orders/{order_id}/complete",
            json={"completion_breakdown": [breakdown_row("Red", s=9, m=20)], "actual_box_count": 4},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"
        assert response.json()["actual_box_count"] == 4

        grid = client.get(f"/api/v1/orders/{order_id}/breakdown").json()
        red = grid["rows"][0]
        assert red["color"] == "Red"
        assert red["cells"]["s"] == {"planned": 10, "actual": 9, "mismatch": True}
        assert red["cells"]["m"]["mismatch"] is False
        assert red["mismatched_sizes"] == ["s"]
        assert grid["size_labels"]["s"] == "S"

        logs = client.get(f"/api/v1/orders/{order_id}/logs").json()
        assert logs[0]["message"] == "Status changed to COMPLETED"
        assert logs[-1]["log_type"] == "CREATION"
        assert len(logs) == 5

    @pytest.mark.api
    def test_qc_reject_then_accept(self, client, db):
        order = create_test_order(db, status="QC")
        db.commit()

        response = client.post(f"/api/v1/orders/{order.id}/qc-decision", json={"accept": False})
        assert response.status_code == 400

        response = client.post(
            f"/api/v1/orders/{order.id}/qc-decision", json={"accept": False, "note": "uneven hems"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "STARTED"
        assert response.json()["qc_notes"] == "QC REJECTED: uneven hems"

        client.post(f"/api/v1/orders/{order.id}/advance")
        response = client.post(f"/api/v1/orders/{order.id}/qc-decision", json={"accept": True, "note": "fixed"})
        assert response.json()["status"] == "QC_APPROVED"

    @pytest.mark.api
    def test_completion_with_unplanned_color(self, client, db):
        order = create_test_order(db, status="QC_APPROVED")
        db.commit()

        response = client.post(
            f"/api/v1/orders/{order.id}/complete",
            json={"completion_breakdown": [breakdown_row("Green", s=1)], "actual_box_count": 1},
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "completion_breakdown"


class TestOrderAdministration:

    @pytest.mark.api
    def test_list_filters(self, client, db):
        unit = create_test_unit(db)
        create_test_order(db, unit=unit, style_number="JACKET", status="QC")
        create_test_order(db, style_number="SHIRT", status="STARTED")
        db.commit()

        assert len(client.get("/api/v1/orders/", params={"unit_id": unit.id}).json()) == 1
        assert len(client.get("/api/v1/orders/", params={"status": ["QC", "STARTED"]}).json()) == 2
        assert client.get("/api/v1/orders/", params={"search": "jack"}).json()[0]["style_number"] == "JACKET"

    @pytest.mark.api
    def test_update_details(self, client, db):
        order = create_test_order(db)
        db.commit()

        response = client.patch(
            f"/api/v1/orders/{order.id}", json={"description": "Rush order", "updated_by": "Admin"}
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Rush order"
        logs = client.get(f"/api/v1/orders/{order.id}/logs").json()
        assert logs[0]["message"] == "Order details updated by Admin"
        assert logs[0]["created_by_name"] == "Admin"

    @pytest.mark.api
    def test_progress_note(self, client, db):
        order = create_test_order(db)
        db.commit()

        response = client.post(f"/api/v1/orders/{order.id}/logs", json={"message": "Cutting finished"})

        assert response.status_code == 201
        assert response.json()["log_type"] == "MANUAL_UPDATE"

    @pytest.mark.api
    def test_delete_refused_with_stock(self, client, db):
        order = create_test_order(db)
        create_test_barcode(db, order=order, status="COMMITTED_TO_STOCK")
        db.commit()

        response = client.delete(f"/api/v1/orders/{order.id}")

        assert response.status_code == 422
        assert response.json()["error"] == "BUSINESS_RULE_ERROR"

    @pytest.mark.api
    def test_delete(self, client, db):
        order = create_test_order(db)
        db.commit()

        assert client.delete(f"/api/v1/orders/{order.id}").status_code == 200
        assert client.get(f"/api/v1/orders/{order.id}").status_code == 404
