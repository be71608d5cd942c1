"""
Report Aggregation

Production statistics over a date window and optional unit:

- total / completed orders, total pieces
- completion rate (one decimal, rounded half-up)
- status distribution
- per-unit volume, largest first
- delayed orders (past target date, not completed), over every order

The aggregation functions are pure over order-like objects, so they work
on ORM rows and on plain test doubles alike.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from tintura.core.status_config import OrderStatus
from tintura.exceptions import ValidationError
from tintura.models import Order, Unit


@dataclass
class UnitPerformance:
    unit_id: int
    name: str
    total_qty: int = 0
    completed_qty: int = 0


@dataclass
class ReportStats:
    total_orders: int
    completed_orders: int
    total_pieces: int
    completion_rate: Decimal
    status_distribution: Dict[str, int] = field(default_factory=dict)
    unit_performance: List[UnitPerformance] = field(default_factory=list)
    delayed_orders: List[Any] = field(default_factory=list)


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def reference_date(order) -> Optional[date]:
    """Created date, falling back to the target delivery date"""
    return _as_date(order.created_at) or _as_date(order.target_delivery_date)


def filter_orders(
    orders: Iterable[Any],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    unit_id: Optional[int] = None,
) -> List[Any]:
    """Orders whose reference date falls in [start_date, end_date]; bounds are inclusive"""
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date", field="start_date")

    selected = []
    for order in orders:
        if unit_id is not None and order.unit_id != unit_id:
            continue
        ref = reference_date(order)
        if (start_date or end_date) and ref is None:
            continue
        if start_date and ref < start_date:
            continue
        if end_date and ref > end_date:
            continue
        selected.append(order)
    return selected


def completion_rate(completed: int, total: int) -> Decimal:
    if total == 0:
        return Decimal("0.0")
    return (Decimal(completed) * 100 / Decimal(total)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def delayed_orders(orders: Iterable[Any], today: Optional[date] = None) -> List[Any]:
    today = today or date.today()
    return [
        o for o in orders
        if o.status != OrderStatus.COMPLETED
        and _as_date(o.target_delivery_date) is not None
        and _as_date(o.target_delivery_date) < today
    ]


def generate_report_stats(
    orders: List[Any],
    unit_names: Optional[Mapping[int, str]] = None,
    today: Optional[date] = None,
    all_orders: Optional[List[Any]] = None,
) -> ReportStats:
    """
    Aggregate statistics for the filtered orders.

    unit_performance has one entry per known unit, zeroed when the unit has
    no orders in the window. Delayed orders are taken from all_orders when
    given, so an overdue order shows up whatever the report filter.
    """
    unit_names = unit_names or {}
    completed = [o for o in orders if o.status == OrderStatus.COMPLETED]

    distribution: Dict[str, int] = OrderedDict()
    for o in orders:
        distribution[o.status] = distribution.get(o.status, 0) + 1

    per_unit: Dict[int, UnitPerformance] = {
        unit_id: UnitPerformance(unit_id=unit_id, name=name) for unit_id, name in unit_names.items()
    }
    for o in orders:
        perf = per_unit.get(o.unit_id)
        if perf is None:
            perf = UnitPerformance(unit_id=o.unit_id, name=f"Unit {o.unit_id}")
            per_unit[o.unit_id] = perf
        perf.total_qty += o.quantity or 0
        if o.status == OrderStatus.COMPLETED:
            perf.completed_qty += o.quantity or 0

    return ReportStats(
        total_orders=len(orders),
        completed_orders=len(completed),
        total_pieces=sum(o.quantity or 0 for o in orders),
        completion_rate=completion_rate(len(completed), len(orders)),
        status_distribution=dict(distribution),
        unit_performance=sorted(per_unit.values(), key=lambda p: p.total_qty, reverse=True),
        delayed_orders=delayed_orders(orders if all_orders is None else all_orders, today=today),
    )


def build_report(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    unit_id: Optional[int] = None,
    today: Optional[date] = None,
) -> ReportStats:
    all_orders = db.query(Order).order_by(Order.id).all()
    orders = filter_orders(all_orders, start_date, end_date, unit_id)
    unit_names = {u.id: u.name for u in db.query(Unit).order_by(Unit.id).all()}
    return generate_report_stats(orders, unit_names, today=today, all_orders=all_orders)
