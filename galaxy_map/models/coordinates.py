"""Coordinate models for two-level (sector + hex) map queries"""
from pydantic import BaseModel, ConfigDict
from typing import Optional

# Every sector holds a fixed 32 x 40 grid of hexes, numbered from 1
SECTOR_WIDTH = 32
SECTOR_HEIGHT = 40


class Point(BaseModel):
    """A hex location: the sector it lies in plus its in-sector coordinates"""
    model_config = ConfigDict(frozen=True)

    sector_x: int
    sector_y: int
    hex_x: Optional[int] = None
    hex_y: Optional[int] = None


class BoundingBox(BaseModel):
    """Query box spanning both levels of the map

    Sector Y decreases as the map goes downward, so a well-formed box has
    upper_left.sector_y >= lower_right.sector_y. Without a lower_right corner
    the box denotes the whole sector containing upper_left, and the upper-left
    hex coordinates are not used.
    """
    model_config = ConfigDict(frozen=True)

    upper_left: Point
    lower_right: Optional[Point] = None

    @property
    def is_whole_sector(self) -> bool:
        return self.lower_right is None

    @property
    def is_single_sector(self) -> bool:
        return (
            self.lower_right is not None
            and self.upper_left.sector_x == self.lower_right.sector_x
            and self.upper_left.sector_y == self.lower_right.sector_y
        )


class Region(BaseModel):
    """One sector's hex rectangle to search, bounds inclusive"""
    model_config = ConfigDict(frozen=True)

    sector_x: int
    sector_y: int
    min_x: int
    max_x: int
    min_y: int
    max_y: int
