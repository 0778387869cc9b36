"""
Coordinate validation for bounding-box queries.

Turns the raw ``ulsx .. lrhy`` query parameters into a BoundingBox, or
rejects the request with a ValidationError whose message is returned to
the client unchanged.
"""
import logging
import re
from typing import Optional

from .exceptions import ValidationError
from .models.coordinates import BoundingBox, Point

logger = logging.getLogger(__name__)

MISSING_UPPER_LEFT = "missing upper-left sector coordinates"
INCOMPLETE_LOWER_RIGHT = "incomplete lower-right specification"
CORNERS_OUT_OF_ORDER = "corners out of order"

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")


def _parse_int(value) -> Optional[int]:
    """Parse a decimal integer parameter, returning None when absent or malformed"""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    return int(text)


def _is_present(value) -> bool:
    return value is not None and str(value).strip() != ""


def parse_bounding_box(
    ulsx=None,
    ulsy=None,
    ulhx=None,
    ulhy=None,
    lrsx=None,
    lrsy=None,
    lrhx=None,
    lrhy=None,
) -> BoundingBox:
    """Validate raw corner parameters and build a BoundingBox.

    Only ``ulsx``/``ulsy`` are always required. Supplying either lower-right
    sector coordinate turns the request into a box query, which then needs
    both lower-right sector coordinates and all four hex coordinates.
    Without a lower-right sector the result is the whole-sector shorthand
    and any hex parameters are ignored.

    Hex values are not range-checked against the sector grid.

    Raises:
        ValidationError: missing, incomplete or out-of-order coordinates
    """
    sector_x = _parse_int(ulsx)
    sector_y = _parse_int(ulsy)
    if sector_x is None or sector_y is None:
        raise ValidationError(MISSING_UPPER_LEFT)

    if not (_is_present(lrsx) or _is_present(lrsy)):
        return BoundingBox(upper_left=Point(sector_x=sector_x, sector_y=sector_y))

    parsed = [_parse_int(v) for v in (lrsx, lrsy, ulhx, ulhy, lrhx, lrhy)]
    if any(v is None for v in parsed):
        raise ValidationError(INCOMPLETE_LOWER_RIGHT)
    lr_sector_x, lr_sector_y, ul_hex_x, ul_hex_y, lr_hex_x, lr_hex_y = parsed

    if sector_x > lr_sector_x or sector_y < lr_sector_y:
        raise ValidationError(CORNERS_OUT_OF_ORDER)

    box = BoundingBox(
        upper_left=Point(sector_x=sector_x, sector_y=sector_y, hex_x=ul_hex_x, hex_y=ul_hex_y),
        lower_right=Point(sector_x=lr_sector_x, sector_y=lr_sector_y, hex_x=lr_hex_x, hex_y=lr_hex_y),
    )
    logger.debug(f"Parsed bounding box {box}")
    return box
