"""
Query Service

Executes composite filters against the row store, lists sectors and
resolves sector map images. Every store or filesystem failure is wrapped in
InternalError; nothing is retried and no partial result is returned.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..database import Projection, sector, select_for_projection, solar_system
from ..exceptions import AssetNotFoundError, InternalError, ValidationError
from ..observers import RegionQueryObserver
from ..predicate_builder import CompositeFilter
from ..region_query import plan_region_query
from .thread_pool_service import ThreadPoolService

logger = logging.getLogger(__name__)

_HEX_LABEL_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class QueryService:
    """Row store and map asset access for the HTTP layer"""

    def __init__(
        self,
        engine: Engine,
        asset_dir: Path,
        asset_extension: str = ".png",
        thread_pool_service: Optional[ThreadPoolService] = None,
    ):
        self.engine = engine
        self.asset_dir = Path(asset_dir)
        self.asset_extension = asset_extension
        self.thread_pool_service = thread_pool_service or ThreadPoolService()

    # Synchronous operations

    def fetch_entities(self, composite_filter: CompositeFilter, projection: Projection) -> List[Dict[str, Any]]:
        statement = select_for_projection(projection).where(
            composite_filter.to_expression(sector, solar_system)
        )
        try:
            with self.engine.connect() as conn:
                rows = [dict(row._mapping) for row in conn.execute(statement)]
        except SQLAlchemyError as e:
            raise InternalError(f"Entity query failed: {e}", operation="list_entities") from e

        logger.info(
            f"Entity query returned {len(rows)} row(s)",
            extra={"event": "entities_listed", "projection": projection.value, "disjuncts": len(composite_filter)},
        )
        return rows

    def fetch_sectors(self) -> List[Dict[str, Any]]:
        statement = select(sector).order_by(sector.c.x, sector.c.y)
        try:
            with self.engine.connect() as conn:
                return [dict(row._mapping) for row in conn.execute(statement)]
        except SQLAlchemyError as e:
            raise InternalError(f"Sector listing failed: {e}", operation="list_sectors") from e

    def resolve_sector_asset(self, sector_x: int, sector_y: int, hex_label: str) -> Path:
        """Locate the map image for a sector and hex label.

        Raises:
            ValidationError: hex label contains anything but letters, digits, '-' or '_'
            AssetNotFoundError: unknown sector or no such image
            InternalError: store or filesystem failure
        """
        if not _HEX_LABEL_PATTERN.fullmatch(hex_label or ""):
            raise ValidationError("invalid hex label")

        statement = select(sector.c.name).where(sector.c.x == sector_x, sector.c.y == sector_y)
        try:
            with self.engine.connect() as conn:
                sector_name = conn.execute(statement).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise InternalError(f"Sector lookup failed: {e}", operation="get_sector_asset") from e

        if sector_name is None:
            raise AssetNotFoundError(sector_x, sector_y, hex_label)

        try:
            root = self.asset_dir.resolve()
            candidate = (root / sector_name / f"{hex_label}{self.asset_extension}").resolve()
            if root not in candidate.parents or not candidate.is_file():
                raise AssetNotFoundError(sector_x, sector_y, hex_label)
        except OSError as e:
            raise InternalError(f"Map asset resolution failed: {e}", operation="get_sector_asset") from e

        return candidate

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise InternalError(f"Database unreachable: {e}", operation="ping") from e
        return True

    # Async wrappers used by the endpoints

    async def plan_region(
        self, params: Mapping[str, Any], observer: Optional[RegionQueryObserver] = None
    ) -> CompositeFilter:
        """Validate and decompose a bounding box off the event loop; ValidationError propagates"""
        return await self.thread_pool_service.run_cpu_task(plan_region_query, params, observer)

    async def list_entities(self, composite_filter: CompositeFilter, projection: Projection) -> List[Dict[str, Any]]:
        return await self.thread_pool_service.run_io_task(self.fetch_entities, composite_filter, projection)

    async def list_sectors(self) -> List[Dict[str, Any]]:
        return await self.thread_pool_service.run_io_task(self.fetch_sectors)

    async def get_sector_asset(self, sector_x: int, sector_y: int, hex_label: str) -> Path:
        return await self.thread_pool_service.run_io_task(
            self.resolve_sector_asset, sector_x, sector_y, hex_label
        )

    async def check_database(self) -> bool:
        return await self.thread_pool_service.run_io_task(self.ping)
