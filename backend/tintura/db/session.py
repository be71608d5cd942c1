"""
Database session management

Two storage backends, chosen by STORAGE_BACKEND:

- database: the configured PostgreSQL (or any SQLAlchemy URL)
- memory:   SQLite in-memory, seeded with demo fixtures

With DEGRADED_FALLBACK enabled, an unreachable database at startup drops
to the memory backend and the service reports itself as degraded. The
switch happens once, at startup, and is never silent.
"""
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tintura.core.settings import Settings, settings
from tintura.db.base import Base
from tintura.exceptions import ServiceUnavailableError
from tintura.logging_config import get_logger

logger = get_logger(__name__)

MEMORY_URL = "sqlite://"


def create_memory_engine() -> Engine:
    """Single shared connection so every session sees the same in-memory data"""
    return create_engine(
        MEMORY_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def create_database_engine(url: str) -> Engine:
    return create_engine(
        url,
        echo=False,  # Set to True for SQL query logging
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,  # Recycle connections after 1 hour
    )


class Storage:
    """
    The active storage backend.

    Attributes:
        mode: "database" or "memory"
        degraded: True when running on memory because the database was unreachable
        engine: SQLAlchemy engine for the backend
        SessionLocal: session factory bound to engine
    """

    def __init__(self):
        self.mode: Optional[str] = None
        self.degraded: bool = False
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

    @property
    def initialized(self) -> bool:
        return self.engine is not None

    def _bind(self, engine: Engine, mode: str, degraded: bool = False) -> None:
        self.engine = engine
        self.mode = mode
        self.degraded = degraded
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _start_memory(self, cfg: Settings, degraded: bool = False) -> None:
        import tintura.models  # noqa: F401
        from tintura.db.fixtures import seed_demo_data

        engine = create_memory_engine()
        Base.metadata.create_all(bind=engine)
        self._bind(engine, "memory", degraded=degraded)
        if cfg.SEED_DEMO_DATA:
            db = self.SessionLocal()
            try:
                seed_demo_data(db)
            finally:
                db.close()

    def initialize(self, cfg: Optional[Settings] = None) -> "Storage":
        """Create the engine for the configured backend (idempotent)"""
        if self.initialized:
            return self
        cfg = cfg or settings

        if cfg.STORAGE_BACKEND == "memory":
            logger.info("Storage backend: in-memory demo store")
            self._start_memory(cfg)
            return self

        engine = create_database_engine(cfg.database_url)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            engine.dispose()
            if not cfg.DEGRADED_FALLBACK:
                logger.error(f"Database unreachable: {e}")
                raise ServiceUnavailableError("Database", "unreachable at startup") from e
            logger.warning(
                "Database unreachable - running in DEGRADED mode on the in-memory store. "
                "Data written now will not reach the database.",
                extra={"error": str(e)},
            )
            self._start_memory(cfg, degraded=True)
            return self

        import tintura.models  # noqa: F401
        Base.metadata.create_all(bind=engine)
        self._bind(engine, "database")
        logger.info(f"Storage backend: database {cfg.DB_HOST}:{cfg.DB_PORT}/{cfg.DB_NAME}")
        return self

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.mode = None
        self.degraded = False
        self.engine = None
        self.SessionLocal = None


storage = Storage()


def get_db():
    """
    Dependency for getting database session

    Usage in FastAPI endpoints:
        @router.get("/orders")
        def list_orders(db: Session = Depends(get_db)):
            ...
    """
    if not storage.initialized:
        storage.initialize()
    db = storage.SessionLocal()
    try:
        yield db
    finally:
        db.close()
