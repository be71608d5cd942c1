"""
Demo fixture data

Seeded into the in-memory store (STORAGE_BACKEND=memory, or degraded mode)
so the dashboards have something representative to show.
"""
from datetime import date, datetime
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from tintura.core.status_config import BarcodeStatus, MaterialStatus, OrderStatus, SizeFormat
from tintura.logging_config import get_logger
from tintura.models import Barcode, MaterialRequest, Order, Unit

logger = get_logger(__name__)


SAMPLE_UNITS: List[Dict[str, Any]] = [
    {"id": 1, "name": "Main HQ (Branch 1)", "is_main": True},
    {"id": 2, "name": "Sewing Subunit (Branch 2)", "is_main": False},
    {"id": 3, "name": "Finishing Subunit", "is_main": False},
]

# created_at is left empty on purpose: reports fall back to the delivery date
SAMPLE_ORDERS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "order_no": "ORD-10001",
        "unit_id": 2,
        "style_number": "ST-500",
        "quantity": 100,
        "box_count": 5,
        "last_barcode_serial": 3,
        "description": "Summer Shirts",
        "target_delivery_date": date(2023, 12, 1),
        "status": OrderStatus.STARTED.value,
        "size_format": SizeFormat.STANDARD.value,
        "size_breakdown": [
            {"color": "Red", "s": 10, "m": 20, "l": 20, "xl": 0, "xxl": 0, "xxxl": 0},
            {"color": "Blue", "s": 10, "m": 20, "l": 20, "xl": 0, "xxl": 0, "xxxl": 0},
        ],
        "created_at": None,
    },
    {
        "id": 2,
        "order_no": "ORD-10002",
        "unit_id": 3,
        "style_number": "ST-600",
        "quantity": 50,
        "box_count": 2,
        "last_barcode_serial": 0,
        "description": "Denim Jackets",
        "target_delivery_date": date(2023, 11, 20),
        "status": OrderStatus.ASSIGNED.value,
        "size_format": SizeFormat.STANDARD.value,
        "size_breakdown": None,
        "created_at": None,
    },
    {
        "id": 3,
        "order_no": "ORD-10003",
        "unit_id": 2,
        "style_number": "ST-500",
        "quantity": 200,
        "box_count": 10,
        "last_barcode_serial": 0,
        "description": "Cotton Pants",
        "target_delivery_date": date(2023, 12, 15),
        "status": OrderStatus.QC.value,
        "qc_notes": "Initial checks pending",
        "size_format": SizeFormat.NUMERIC.value,
        "size_breakdown": None,
        "created_at": None,
    },
]

SAMPLE_MATERIAL_REQUESTS: List[Dict[str, Any]] = [
    {
        "id": 101,
        "order_id": 1,
        "material_content": "Blue Thread (50 spools)",
        "quantity_requested": 50,
        "quantity_approved": 0,
        "unit": "Nos",
        "status": MaterialStatus.PENDING.value,
    },
]

SAMPLE_BARCODES: List[Dict[str, Any]] = [
    {
        "barcode_serial": "ORD-10001;ST-500;M;00001",
        "order_id": 1,
        "style_number": "ST-500",
        "size": "M",
        "status": BarcodeStatus.PUSHED_OUT_OF_SUBUNIT.value,
    },
    {
        "barcode_serial": "ORD-10001;ST-500;L;00002",
        "order_id": 1,
        "style_number": "ST-500",
        "size": "L",
        "status": BarcodeStatus.PUSHED_OUT_OF_SUBUNIT.value,
    },
    {
        "barcode_serial": "ORD-10001;ST-500;S;00003",
        "order_id": 1,
        "style_number": "ST-500",
        "size": "S",
        "status": BarcodeStatus.GENERATED.value,
    },
]


def seed_demo_data(db: Session) -> Dict[str, int]:
    """Insert fixture rows into an empty store. Idempotent."""
    if db.query(Unit).count() > 0:
        logger.info("Demo data already present, skipping seed")
        return {"units": 0, "orders": 0, "material_requests": 0, "barcodes": 0}

    db.add_all([Unit(**row) for row in SAMPLE_UNITS])
    db.flush()

    for row in SAMPLE_ORDERS:
        order = Order(**{k: v for k, v in row.items() if k != "created_at"})
        db.add(order)
        db.flush()
        # Column defaults would otherwise stamp "now"
        order.created_at = row["created_at"]

    db.add_all([MaterialRequest(created_at=datetime.utcnow(), **row) for row in SAMPLE_MATERIAL_REQUESTS])
    db.add_all([Barcode(**row) for row in SAMPLE_BARCODES])
    db.commit()

    counts = {
        "units": len(SAMPLE_UNITS),
        "orders": len(SAMPLE_ORDERS),
        "material_requests": len(SAMPLE_MATERIAL_REQUESTS),
        "barcodes": len(SAMPLE_BARCODES),
    }
    logger.info("Seeded demo data", extra=counts)
    return counts
