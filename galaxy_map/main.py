import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .api.v1.endpoints import router as galaxy_router, limiter
from .dependencies import init_service_container, close_service_container, get_service_container
from .exceptions import InternalError
from .logging_config import setup_logging

settings = get_settings()

setup_logging(
    level=settings.LOG_LEVEL,
    use_json=settings.LOG_FORMAT == "json" or None,
    service_name="galaxy-map",
    log_file=settings.LOG_FILE,
)
logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service container, check the row store, and tear down on exit."""
    logger.info("Starting Galaxy Map Service...", extra={"event": "startup_begin"})

    container = init_service_container(get_settings())
    try:
        await container.query_service.check_database()
        logger.info("Database connectivity validated", extra={"event": "database_ready"})
    except InternalError as e:
        if container.settings.APP_ENV == "production":
            logger.critical(f"Production service cannot start without its database: {e}")
            await close_service_container()
            raise SystemExit(1)
        logger.warning(f"Development service starting without a reachable database: {e}")

    logger.info("Galaxy Map Service started", extra={"event": "startup_complete"})

    yield  # App ready for traffic

    logger.info("Shutting down Galaxy Map Service...", extra={"event": "shutdown_begin"})
    try:
        await close_service_container()
        logger.info("Galaxy Map Service shut down successfully", extra={"event": "shutdown_complete"})
    except Exception:
        logger.error("Error during shutdown", extra={"event": "shutdown_failed"}, exc_info=True)


app = FastAPI(
    title="Galaxy Map Service",
    description="Spatial queries over a galaxy of sectors, each a 32 x 40 grid of hexes",
    version=SERVICE_VERSION,
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

logger.info(f"CORS configured for origins: {settings.cors_origin_list}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS", "HEAD"],
    allow_headers=["Content-Type", "Accept", "Origin", "Cache-Control", "X-Requested-With"],
    expose_headers=["Content-Length", "Content-Type"],
    max_age=86400  # 24 hours
)

# Unprefixed paths at the root, versioned copies under /api/v1
app.include_router(galaxy_router)
app.include_router(galaxy_router, prefix="/api/v1")

_start_time = time.time()


@app.get("/", tags=["health"])
async def root():
    """Service banner."""
    return {
        "service": "Galaxy Map Service",
        "status": "running",
        "version": SERVICE_VERSION,
        "features": [
            "Whole-sector and multi-sector bounding box queries",
            "Solar system and star projections",
            "Ordered sector listing",
            "Sector map images",
        ]
    }


@app.get("/api/v1/health", tags=["health"])
async def health_check():
    """Health check including database reachability."""
    health_response = {
        "status": "healthy",
        "service": "Galaxy Map Service",
        "version": SERVICE_VERSION,
        "uptime_seconds": int(time.time() - _start_time),
        "last_check": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime()),
    }
    try:
        container = get_service_container()
    except RuntimeError:
        health_response["status"] = "starting"
        return health_response

    try:
        await container.query_service.check_database()
        health_response["database"] = "reachable"
    except InternalError as e:
        logger.warning(f"Health check found database unreachable: {e}")
        health_response["status"] = "degraded"
        health_response["database"] = "unreachable"
    health_response["thread_pool"] = container.thread_pool_service.get_pool_stats()
    return health_response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
