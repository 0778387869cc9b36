"""Response models for the Galaxy Map API"""
from pydantic import BaseModel, Field
from typing import Optional

from .coordinates import BoundingBox, Point, Region, SECTOR_HEIGHT, SECTOR_WIDTH


class SectorRecord(BaseModel):
    """One cell of the galaxy grid"""
    id: int
    x: int
    y: int
    name: str


class SolarSystemRecord(BaseModel):
    """Full solar system row joined with its sector"""
    id: int
    sector_id: int
    x: int = Field(..., description="Hex column inside the sector (1-32)")
    y: int = Field(..., description="Hex row inside the sector (1-40)")
    name: str
    sector_x: int
    sector_y: int
    sector_name: str


class StarRecord(BaseModel):
    """Star row with the location of the solar system it belongs to"""
    id: int
    solar_system_id: int
    name: str
    spectral_type: Optional[str] = None
    x: int
    y: int
    sector_x: int
    sector_y: int


class ErrorResponse(BaseModel):
    detail: str


__all__ = [
    "BoundingBox", "Point", "Region", "SECTOR_HEIGHT", "SECTOR_WIDTH",
    "SectorRecord", "SolarSystemRecord", "StarRecord", "ErrorResponse",
]
