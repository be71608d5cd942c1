"""
Production Unit API Endpoints
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tintura.db.repository import Repository
from tintura.db.session import get_db
from tintura.models import Unit
from tintura.schemas.unit import UnitResponse

router = APIRouter()


@router.get("/", response_model=List[UnitResponse], summary="List production units")
def list_units(db: Session = Depends(get_db)):
    return Repository(db, Unit).fetch_all(order_by=Unit.id)
