"""
Query planning: raw parameters -> BoundingBox -> regions -> CompositeFilter.
"""
import logging
from typing import Any, Mapping, Optional

from .coordinate_validator import parse_bounding_box
from .observers import RegionQueryObserver
from .predicate_builder import CompositeFilter, build_filter
from .region_decomposer import decompose

logger = logging.getLogger(__name__)

COORDINATE_PARAMETERS = ("ulsx", "ulsy", "ulhx", "ulhy", "lrsx", "lrsy", "lrhx", "lrhy")


def _notify(observer: Optional[RegionQueryObserver], hook: str, *args) -> None:
    if observer is None:
        return
    try:
        getattr(observer, hook)(*args)
    except Exception as e:
        logger.warning(f"Region query observer hook {hook} failed: {e}", exc_info=True)


def plan_region_query(
    params: Mapping[str, Any],
    observer: Optional[RegionQueryObserver] = None,
) -> CompositeFilter:
    """Validate the coordinate parameters and build the filter for them.

    Raises:
        ValidationError: the parameters do not describe a valid box
    """
    box = parse_bounding_box(**{name: params.get(name) for name in COORDINATE_PARAMETERS})
    _notify(observer, "box_parsed", box)

    regions = decompose(box)
    _notify(observer, "regions_decomposed", box, regions)

    composite_filter = build_filter(regions)
    _notify(observer, "filter_built", composite_filter)
    return composite_filter
