"""Schemas for production units."""
from pydantic import BaseModel


class UnitResponse(BaseModel):
    id: int
    name: str
    is_main: bool

    class Config:
        from_attributes = True
