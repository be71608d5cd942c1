"""
Storage backend selection: memory demo store, degraded fallback and
a hard failure when the database is unreachable without fallback.
"""
import pytest
from fastapi.testclient import TestClient

from tintura.core.settings import Settings
from tintura.db.session import Storage, storage
from tintura.exceptions import ServiceUnavailableError
from tintura.main import app
from tintura.models import Order, Unit

# A file in a directory that does not exist cannot be opened
UNREACHABLE_URL = "sqlite:////nonexistent-tintura-dir/tintura.db"


def _settings(**overrides):
    values = {"STORAGE_BACKEND": "database", "DATABASE_URL": UNREACHABLE_URL, "SEED_DEMO_DATA": True}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def fresh_storage():
    backend = Storage()
    yield backend
    backend.dispose()


class TestMemoryBackend:

    @pytest.mark.integration
    def test_memory_store_is_seeded(self, fresh_storage):
        fresh_storage.initialize(_settings(STORAGE_BACKEND="memory"))

        assert fresh_storage.mode == "memory"
        assert fresh_storage.degraded is False
        db = fresh_storage.SessionLocal()
        try:
            assert db.query(Unit).count() == 3
            assert db.query(Order).count() == 3
        finally:
            db.close()

    @pytest.mark.integration
    def test_seeding_can_be_disabled(self, fresh_storage):
        fresh_storage.initialize(_settings(STORAGE_BACKEND="memory", SEED_DEMO_DATA=False))

        db = fresh_storage.SessionLocal()
        try:
            assert db.query(Unit).count() == 0
        finally:
            db.close()


class TestUnreachableDatabase:

    @pytest.mark.integration
    def test_without_fallback_startup_fails(self, fresh_storage):
        with pytest.raises(ServiceUnavailableError):
            fresh_storage.initialize(_settings(DEGRADED_FALLBACK=False))

        assert fresh_storage.initialized is False

    @pytest.mark.integration
    def test_fallback_switches_to_memory(self, fresh_storage):
        fresh_storage.initialize(_settings(DEGRADED_FALLBACK=True))

        assert fresh_storage.mode == "memory"
        assert fresh_storage.degraded is True


class TestDegradedService:

    @pytest.fixture
    def degraded_client(self):
        storage.dispose()
        storage.initialize(_settings(DEGRADED_FALLBACK=True))
        with TestClient(app) as test_client:
            yield test_client
        storage.dispose()

    @pytest.mark.integration
    def test_every_response_is_flagged(self, degraded_client):
        health = degraded_client.get("/health")
        assert health.json() == {"status": "degraded", "storage": "memory"}
        assert health.headers["X-Storage-Mode"] == "degraded"

        orders = degraded_client.get("/api/v1/orders/")
        assert orders.status_code == 200
        assert orders.headers["X-Storage-Mode"] == "degraded"
        assert {o["order_no"] for o in orders.json()} == {"ORD-10001", "ORD-10002", "ORD-10003"}
