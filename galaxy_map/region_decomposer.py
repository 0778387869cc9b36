"""
Region decomposition.

Splits a two-level BoundingBox into one hex rectangle per sector it touches,
so that a flat (sector.x, sector.y, x, y) store can answer the query with
plain range conditions.
"""
from typing import List

from .models.coordinates import BoundingBox, Region, SECTOR_HEIGHT, SECTOR_WIDTH


def _whole_sector(sector_x: int, sector_y: int) -> Region:
    return Region(
        sector_x=sector_x,
        sector_y=sector_y,
        min_x=1,
        max_x=SECTOR_WIDTH,
        min_y=1,
        max_y=SECTOR_HEIGHT,
    )


def decompose(box: BoundingBox) -> List[Region]:
    """Decompose a bounding box into per-sector regions.

    - No lower-right corner: the whole upper-left sector.
    - Both corners in one sector: the literal hex corners, unclamped.
    - Otherwise every sector in the box, sector X ascending and sector Y
      descending. Edge sectors take the caller's hex bound on the edges they
      share with the box; every other edge spans the full sector.

    The box is assumed to satisfy the validator's corner ordering.
    """
    upper_left = box.upper_left
    lower_right = box.lower_right

    if lower_right is None:
        return [_whole_sector(upper_left.sector_x, upper_left.sector_y)]

    if box.is_single_sector:
        return [
            Region(
                sector_x=upper_left.sector_x,
                sector_y=upper_left.sector_y,
                min_x=upper_left.hex_x,
                max_x=lower_right.hex_x,
                min_y=upper_left.hex_y,
                max_y=lower_right.hex_y,
            )
        ]

    regions = []
    for sector_x in range(upper_left.sector_x, lower_right.sector_x + 1):
        first_column = sector_x == upper_left.sector_x
        last_column = sector_x == lower_right.sector_x
        for sector_y in range(upper_left.sector_y, lower_right.sector_y - 1, -1):
            first_row = sector_y == upper_left.sector_y
            last_row = sector_y == lower_right.sector_y
            regions.append(
                Region(
                    sector_x=sector_x,
                    sector_y=sector_y,
                    min_x=upper_left.hex_x if first_column else 1,
                    max_x=lower_right.hex_x if last_column else SECTOR_WIDTH,
                    min_y=upper_left.hex_y if first_row else 1,
                    max_y=lower_right.hex_y if last_row else SECTOR_HEIGHT,
                )
            )
    return regions
