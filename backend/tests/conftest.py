"""
Shared test fixtures for Tintura SST tests

Provides database setup, client creation and seeded sample data
"""
import os

# Must be set before tintura settings are first imported
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("DEGRADED_FALLBACK", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tintura.main import app
from tintura.db.base import Base
from tintura.db.session import get_db, storage
from tintura.services.inventory_staging import scan_sessions

from tests.factories import reset_sequences


# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine):
    """Create all tables for testing using SQLAlchemy metadata"""
    # Import all models to ensure they're registered with Base
    import tintura.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_tables(engine):
    """Drop all tables after testing"""
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Create a fresh database session for each test"""
    create_tables(engine)
    reset_sequences()

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        drop_tables(engine)
        scan_sessions.clear_all()


@pytest.fixture
def db(db_session):
    """Short alias used by most tests"""
    return db_session


@pytest.fixture
def client(db_session):
    """Create a test client with database override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    storage.dispose()


@pytest.fixture
def seeded_db(db_session):
    """Session over the demo fixture data (units, three orders, barcodes)"""
    from tintura.db.fixtures import seed_demo_data

    seed_demo_data(db_session)
    return db_session


@pytest.fixture
def sample_unit(db_session):
    from tests.factories import create_test_unit

    unit = create_test_unit(db_session, name="Sewing Subunit")
    db_session.commit()
    return unit
