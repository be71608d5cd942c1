"""
API v1 Router - Tintura SST
"""
from fastapi import APIRouter

from tintura.schemas.common import ErrorResponse
from tintura.api.v1.endpoints import (
    units,
    orders,
    barcodes,
    materials,
    inventory,
    sales,
    reports,
)

# Every route shares the error envelope rendered by the app exception handlers
router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    }
)

# Reference data
router.include_router(
    units.router,
    prefix="/units",
    tags=["units"]
)

# Orders & lifecycle
router.include_router(
    orders.router,
    prefix="/orders",
    tags=["orders"]
)

# Barcodes
router.include_router(
    barcodes.router,
    prefix="/barcodes",
    tags=["barcodes"]
)

# Materials
router.include_router(
    materials.router,
    prefix="/materials",
    tags=["materials"]
)

# Inventory (scan sessions, stock commits)
router.include_router(
    inventory.router,
    prefix="/inventory",
    tags=["inventory"]
)

# Sales
router.include_router(
    sales.router,
    prefix="/sales",
    tags=["sales"]
)

# Reports
router.include_router(
    reports.router,
    prefix="/reports",
    tags=["reports"]
)
