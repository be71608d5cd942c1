"""
Generic keyed-record repository

Thin CRUD layer over a SQLAlchemy session, one instance per model:

    orders = Repository(db, Order)
    order = orders.fetch_one(order_id)
    orders.fetch_all(unit_id=2, order_by=Order.created_at.desc())
    barcodes.fetch_all(barcode_serial=["A;1", "A;2"])      # IN filter
    barcodes.update_where({"id": ids, "status": "COMMITTED_TO_STOCK"},
                          {"status": "SOLD"})

Filters are equality checks; a list/tuple/set value becomes an IN filter.
Nothing here commits - the calling service owns the transaction.
"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tintura.exceptions import PersistenceError
from tintura.logging_config import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT")


def _criteria(model, filters: Dict[str, Any]) -> list:
    clauses = []
    for name, value in filters.items():
        column = getattr(model, name)
        if isinstance(value, (list, tuple, set, frozenset)):
            clauses.append(column.in_(list(value)))
        else:
            clauses.append(column == value)
    return clauses


class Repository(Generic[ModelT]):
    """CRUD operations on one entity type"""

    def __init__(self, db: Session, model: Type[ModelT]):
        self.db = db
        self.model = model

    def fetch_all(self, order_by=None, **filters) -> List[ModelT]:
        query = self.db.query(self.model).filter(*_criteria(self.model, filters))
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def fetch_one(self, record_id: Any) -> Optional[ModelT]:
        return self.db.get(self.model, record_id)

    def fetch_first(self, **filters) -> Optional[ModelT]:
        return self.db.query(self.model).filter(*_criteria(self.model, filters)).first()

    def count(self, **filters) -> int:
        return self.db.query(self.model).filter(*_criteria(self.model, filters)).count()

    def insert(self, record: ModelT) -> ModelT:
        """Add and flush so the primary key is assigned"""
        self.db.add(record)
        self.db.flush()
        return record

    def insert_many(self, records: List[ModelT]) -> List[ModelT]:
        self.db.add_all(records)
        self.db.flush()
        return records

    def update(self, record_id: Any, values: Dict[str, Any]) -> int:
        return self.update_where({"id": record_id}, values)

    def update_where(self, filters: Dict[str, Any], values: Dict[str, Any]) -> int:
        """
        Conditional bulk update.

        Returns the number of rows matched, so callers can detect a lost
        compare-and-swap (expected prior state no longer holds).
        """
        stmt = (
            update(self.model)
            .where(*_criteria(self.model, filters))
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        result = self.db.execute(stmt)
        return result.rowcount

    def update_where_not(
        self, filters: Dict[str, Any], excluded: Dict[str, Any], values: Dict[str, Any]
    ) -> int:
        """Like update_where, but also requires each `excluded` column NOT IN the given values"""
        clauses = _criteria(self.model, filters)
        for name, value in excluded.items():
            clauses.append(getattr(self.model, name).notin_(list(value)))
        stmt = (
            update(self.model)
            .where(*clauses)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(stmt).rowcount

    def delete_where(self, **filters) -> int:
        return (
            self.db.query(self.model)
            .filter(*_criteria(self.model, filters))
            .delete(synchronize_session="fetch")
        )


def commit_or_rollback(db: Session, operation: str) -> None:
    """
    Commit the session; on a store failure roll back and raise PersistenceError.

    Every multi-step write goes through here once, so either all of its
    steps are stored or none are.
    """
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Commit failed during {operation}: {e}", exc_info=True)
        raise PersistenceError(f"Could not save {operation}", operation=operation) from e
