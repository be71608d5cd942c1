"""
Tests for root, health and error envelopes
"""
import pytest

from tests.factories import create_test_unit


class TestHealth:

    @pytest.mark.api
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "online"

    @pytest.mark.api
    def test_health_in_memory_mode(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "storage": "memory"}
        assert "X-Storage-Mode" not in response.headers

    @pytest.mark.api
    def test_security_headers(self, client):
        response = client.get("/health")
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestUnits:

    @pytest.mark.api
    def test_list_units(self, client, db):
        create_test_unit(db, name="Cutting")
        create_test_unit(db, name="Sewing")
        db.commit()

        response = client.get("/api/v1/units/")

        assert response.status_code == 200
        assert [u["name"] for u in response.json()] == ["Cutting", "Sewing"]


class TestErrorEnvelope:

    @pytest.mark.api
    def test_not_found_shape(self, client):
        response = client.get("/api/v1/orders/123")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "NOT_FOUND"
        assert body["message"] == "Order with ID 123 not found"
        assert "timestamp" in body
