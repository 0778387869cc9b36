import logging
from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.responses import FileResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Any, Dict, List, Optional

from ...config import get_settings
from ...database import Projection
from ...dependencies import get_query_service, get_region_query_observer
from ...exceptions import AssetNotFoundError, InternalError, ValidationError
from ...models import SectorRecord, SolarSystemRecord, StarRecord, ErrorResponse
from ...observers import RegionQueryObserver
from ...services.query_service import QueryService

logger = logging.getLogger(__name__)

_settings = get_settings()
limiter = Limiter(key_func=get_remote_address, enabled=_settings.RATE_LIMIT_ENABLED)
RATE_LIMIT = _settings.RATE_LIMIT

router = APIRouter(tags=["galaxy"])

_ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


async def _query_region(
    params: Dict[str, Optional[str]],
    projection: Projection,
    service: QueryService,
    observer: RegionQueryObserver,
    failure_message: str,
) -> List[Dict[str, Any]]:
    try:
        composite_filter = await service.plan_region(params, observer)
        return await service.list_entities(composite_filter, projection)
    except ValidationError as e:
        logger.warning(f"Rejected {projection.value} query: {e.message}", extra={"event": "validation_failed"})
        raise HTTPException(status_code=400, detail=e.message)
    except InternalError as e:
        logger.error(f"Store failure during {projection.value} query: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=failure_message)
    except Exception as e:
        logger.error(f"Unexpected error during {projection.value} query: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=failure_message)


@router.get(
    "/solarsystems",
    response_model=List[SolarSystemRecord],
    responses=_ERROR_RESPONSES,
    summary="List solar systems inside a sector or a two-level bounding box",
)
@limiter.limit(RATE_LIMIT)
async def get_solar_systems(
    request: Request,
    ulsx: Optional[str] = None,
    ulsy: Optional[str] = None,
    ulhx: Optional[str] = None,
    ulhy: Optional[str] = None,
    lrsx: Optional[str] = None,
    lrsy: Optional[str] = None,
    lrhx: Optional[str] = None,
    lrhy: Optional[str] = None,
    service: QueryService = Depends(get_query_service),
    observer: RegionQueryObserver = Depends(get_region_query_observer),
):
    """Get every solar system in the requested area.

    ``ulsx``/``ulsy`` alone select a whole sector. Adding the lower-right
    sector selects a box, which then needs all four hex coordinates too.
    """
    params = dict(ulsx=ulsx, ulsy=ulsy, ulhx=ulhx, ulhy=ulhy, lrsx=lrsx, lrsy=lrsy, lrhx=lrhx, lrhy=lrhy)
    return await _query_region(
        params, Projection.FULL, service, observer, "Failed to retrieve solar system data"
    )


@router.get(
    "/stars",
    response_model=List[StarRecord],
    responses=_ERROR_RESPONSES,
    summary="List stars inside a sector or a two-level bounding box",
)
@limiter.limit(RATE_LIMIT)
async def get_stars(
    request: Request,
    ulsx: Optional[str] = None,
    ulsy: Optional[str] = None,
    ulhx: Optional[str] = None,
    ulhy: Optional[str] = None,
    lrsx: Optional[str] = None,
    lrsy: Optional[str] = None,
    lrhx: Optional[str] = None,
    lrhy: Optional[str] = None,
    service: QueryService = Depends(get_query_service),
    observer: RegionQueryObserver = Depends(get_region_query_observer),
):
    """Same area semantics as /solarsystems, returning star rows only."""
    params = dict(ulsx=ulsx, ulsy=ulsy, ulhx=ulhx, ulhy=ulhy, lrsx=lrsx, lrsy=lrsy, lrhx=lrhx, lrhy=lrhy)
    return await _query_region(
        params, Projection.STARS, service, observer, "Failed to retrieve star data"
    )


@router.get(
    "/sectors",
    response_model=List[SectorRecord],
    responses={500: {"model": ErrorResponse}},
    summary="List all sectors ordered by (x, y)",
)
@limiter.limit(RATE_LIMIT)
async def get_sectors(
    request: Request,
    service: QueryService = Depends(get_query_service),
):
    try:
        return await service.list_sectors()
    except Exception as e:
        logger.error(f"Failed to list sectors: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve sectors")


@router.get(
    "/sectors/{sector_x}/{sector_y}/map/{hex_label}",
    response_class=FileResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Map image for one hex of a sector",
)
@limiter.limit(RATE_LIMIT)
async def get_sector_map(
    request: Request,
    sector_x: int,
    sector_y: int,
    hex_label: str,
    service: QueryService = Depends(get_query_service),
):
    try:
        path = await service.get_sector_asset(sector_x, sector_y, hex_label)
    except ValidationError as e:
        logger.warning(f"Rejected map asset request: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except AssetNotFoundError as e:
        logger.info(f"Map asset not found: {e.message}", extra={"event": "asset_not_found"})
        raise HTTPException(status_code=404, detail="map asset not found")
    except Exception as e:
        logger.error(f"Failed to resolve map asset: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve map asset")
    return FileResponse(path)
