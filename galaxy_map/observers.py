"""
Observers notified while a region query is planned.

Observers are informational only: the planner never depends on them for its
result, and a failing hook is logged and skipped.
"""
import logging
from typing import Sequence

from .models.coordinates import BoundingBox, Region

logger = logging.getLogger(__name__)


class RegionQueryObserver:
    """No-op base class; override the hooks you care about"""

    def box_parsed(self, box: BoundingBox) -> None:
        pass

    def regions_decomposed(self, box: BoundingBox, regions: Sequence[Region]) -> None:
        pass

    def filter_built(self, composite_filter) -> None:
        pass


class LoggingRegionQueryObserver(RegionQueryObserver):
    """Reports each planning stage through the standard logging module"""

    def __init__(self, log: logging.Logger = None):
        self.log = log or logger

    def box_parsed(self, box: BoundingBox) -> None:
        self.log.debug(
            "Bounding box parsed",
            extra={
                "event": "box_parsed",
                "whole_sector": box.is_whole_sector,
                "upper_left": box.upper_left.model_dump(),
                "lower_right": box.lower_right.model_dump() if box.lower_right else None,
            },
        )

    def regions_decomposed(self, box: BoundingBox, regions: Sequence[Region]) -> None:
        self.log.info(
            f"Bounding box decomposed into {len(regions)} sector region(s)",
            extra={"event": "regions_decomposed", "region_count": len(regions)},
        )

    def filter_built(self, composite_filter) -> None:
        self.log.debug(
            "Composite filter built",
            extra={"event": "filter_built", "disjuncts": len(composite_filter)},
        )
