"""
Quantity Reconciliation

Size-breakdown arithmetic and planned vs. actual comparison.

Breakdown rows are plain dicts as stored on the order:
    {"color": "Red", "s": 10, "m": 20, "l": 0, "xl": 0, "xxl": 0, "xxxl": 0}

Planned and completion rows are joined by color (trimmed, case-insensitive),
never by position, so a reordered completion form cannot misalign data.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from tintura.core.status_config import MaterialStatus, OrderStatus, SizeFormat
from tintura.exceptions import ValidationError

SIZE_KEYS = ("s", "m", "l", "xl", "xxl", "xxxl")

# Column labels per size format
SIZE_LABELS = {
    SizeFormat.STANDARD.value: {"s": "S", "m": "M", "l": "L", "xl": "XL", "xxl": "XXL", "xxxl": "XXXL"},
    SizeFormat.NUMERIC.value: {"s": "65", "m": "70", "l": "75", "xl": "80", "xxl": "85", "xxxl": "90"},
}


def size_labels(size_format: Optional[str]) -> Dict[str, str]:
    """Column labels for a size format; unknown formats fall back to standard"""
    return SIZE_LABELS.get(size_format, SIZE_LABELS[SizeFormat.STANDARD.value])


def row_total(row: Mapping[str, Any]) -> int:
    """Sum of the six size cells; missing or empty cells count as 0"""
    return sum(int(row.get(key) or 0) for key in SIZE_KEYS)


def order_total(breakdown: Optional[Iterable[Mapping[str, Any]]]) -> int:
    """Sum of row totals over a whole matrix"""
    if not breakdown:
        return 0
    return sum(row_total(row) for row in breakdown)


def row_key(color: Optional[str]) -> str:
    return (color or "").strip().lower()


def validate_breakdown(rows: List[Mapping[str, Any]], field_name: str = "size_breakdown") -> None:
    """
    Reject matrices that cannot be keyed or summed.

    Raises:
        ValidationError: blank or repeated color, or a negative cell
    """
    seen = set()
    for idx, row in enumerate(rows):
        key = row_key(row.get("color"))
        if not key:
            raise ValidationError(f"Row {idx + 1} has no color", field=field_name)
        if key in seen:
            raise ValidationError(
                f"Color '{row.get('color')}' appears more than once",
                field=field_name,
                value=row.get("color"),
            )
        seen.add(key)
        for size in SIZE_KEYS:
            if int(row.get(size) or 0) < 0:
                raise ValidationError(
                    f"Negative quantity for {row.get('color')} / {size.upper()}",
                    field=field_name,
                )


def index_by_color(rows: Optional[Iterable[Mapping[str, Any]]]) -> Dict[str, Mapping[str, Any]]:
    return {row_key(row.get("color")): row for row in (rows or [])}


def empty_completion_rows(planned: Optional[List[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """Zeroed completion form, one row per planned color"""
    if not planned:
        return [{"color": "Standard", **{key: 0 for key in SIZE_KEYS}}]
    return [{"color": row.get("color"), **{key: 0 for key in SIZE_KEYS}} for row in planned]


def validate_completion(
    planned: Optional[List[Mapping[str, Any]]],
    actual: List[Mapping[str, Any]],
) -> None:
    """Completion rows must name colors that exist in the plan"""
    validate_breakdown(actual, field_name="completion_breakdown")
    if not planned:
        return
    planned_keys = set(index_by_color(planned))
    for row in actual:
        if row_key(row.get("color")) not in planned_keys:
            raise ValidationError(
                f"Color '{row.get('color')}' is not part of the planned breakdown",
                field="completion_breakdown",
                value=row.get("color"),
            )


# ============================================================================
# Planned vs. actual comparison
# ============================================================================

@dataclass
class CellComparison:
    """One size cell (or a row total): planned always, actual once completed"""
    planned: int
    actual: Optional[int] = None

    @property
    def mismatch(self) -> bool:
        return self.actual is not None and self.actual != self.planned


@dataclass
class RowComparison:
    color: str
    cells: Dict[str, CellComparison] = field(default_factory=dict)
    total: CellComparison = field(default_factory=lambda: CellComparison(planned=0))

    @property
    def has_actual(self) -> bool:
        return self.total.actual is not None

    @property
    def mismatched_sizes(self) -> List[str]:
        return [size for size, cell in self.cells.items() if cell.mismatch]


def compare_breakdowns(
    status: str,
    planned: Optional[List[Mapping[str, Any]]],
    actual: Optional[List[Mapping[str, Any]]],
) -> List[RowComparison]:
    """
    Build the detail grid for an order.

    Actual values appear only when the order is COMPLETED and a completion
    row exists for the planned color; otherwise only planned values are set.
    """
    show_actual = status == OrderStatus.COMPLETED
    actual_by_color = index_by_color(actual) if show_actual else {}

    rows = []
    for planned_row in planned or []:
        actual_row = actual_by_color.get(row_key(planned_row.get("color")))
        comparison = RowComparison(color=planned_row.get("color"))
        for size in SIZE_KEYS:
            comparison.cells[size] = CellComparison(
                planned=int(planned_row.get(size) or 0),
                actual=int(actual_row.get(size) or 0) if actual_row is not None else None,
            )
        comparison.total = CellComparison(
            planned=row_total(planned_row),
            actual=row_total(actual_row) if actual_row is not None else None,
        )
        rows.append(comparison)
    return rows


# ============================================================================
# Material request reconciliation
# ============================================================================

def derive_material_status(
    quantity_requested: Decimal,
    quantity_approved: Decimal,
    explicit_rejection: bool = False,
) -> MaterialStatus:
    """
    Status as a pure function of the requested/approved pair.

    (100, 100, False) -> APPROVED
    (100, 40, False)  -> PARTIALLY_APPROVED
    (100, 0, True)    -> REJECTED
    (100, 0, False)   -> PENDING
    """
    if quantity_approved >= quantity_requested:
        return MaterialStatus.APPROVED
    if quantity_approved > 0:
        return MaterialStatus.PARTIALLY_APPROVED
    if explicit_rejection:
        return MaterialStatus.REJECTED
    return MaterialStatus.PENDING
