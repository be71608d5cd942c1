"""
Tests for the production report endpoint
"""
from datetime import date, datetime

import pytest

from tests.factories import create_test_order, create_test_unit


@pytest.fixture
def report_orders(db):
    unit_a = create_test_unit(db, name="Cutting")
    unit_b = create_test_unit(db, name="Sewing")
    create_test_order(db, unit=unit_a, status="COMPLETED", created_at=datetime(2024, 3, 1, 9, 0))
    create_test_order(db, unit=unit_a, status="QC", created_at=datetime(2024, 3, 15, 9, 0),
                      target_delivery_date=date(2024, 3, 20))
    create_test_order(db, unit=unit_b, status="STARTED", created_at=datetime(2024, 4, 2, 9, 0))
    db.commit()
    return unit_a, unit_b


class TestProductionReport:

    @pytest.mark.api
    def test_march_report(self, client, report_orders):
        response = client.get(
            "/api/v1/reports/production", params={"start_date": "2024-03-01", "end_date": "2024-03-31"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_orders"] == 2
        assert data["completed_orders"] == 1
        assert data["total_pieces"] == 60
        assert float(data["completion_rate"]) == 50.0
        assert data["status_distribution"] == {"COMPLETED": 1, "QC": 1}
        assert [o["status"] for o in data["delayed_orders"]] == ["QC"]

    @pytest.mark.api
    def test_unit_filter(self, client, report_orders):
        _, sewing = report_orders

        data = client.get("/api/v1/reports/production", params={"unit_id": sewing.id}).json()

        assert data["total_orders"] == 1
        assert data["unit_performance"][0]["name"] == "Sewing"
        assert data["unit_performance"][0]["completed_qty"] == 0

    @pytest.mark.api
    def test_inverted_range(self, client):
        response = client.get(
            "/api/v1/reports/production", params={"start_date": "2024-04-01", "end_date": "2024-03-01"}
        )
        assert response.status_code == 400
