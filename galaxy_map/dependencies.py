"""
Dependency Injection Container for Galaxy Map services.

The container builds the service graph once at startup and hands the pieces
to FastAPI through small dependency functions, which tests override.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from .config import Settings
from .database import create_db_engine
from .observers import LoggingRegionQueryObserver, RegionQueryObserver
from .services.query_service import QueryService
from .services.thread_pool_service import ThreadPoolService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Manages service lifecycle and dependencies"""

    def __init__(self, settings: Settings, engine: Optional[Engine] = None):
        self.settings = settings
        self._engine: Optional[Engine] = engine
        self._thread_pool_service: Optional[ThreadPoolService] = None
        self._query_service: Optional[QueryService] = None
        self._observer: Optional[RegionQueryObserver] = None

        logger.info(f"ServiceContainer initialized (env: {settings.APP_ENV})")

    @property
    def engine(self) -> Engine:
        """Get or create the SQLAlchemy engine"""
        if self._engine is None:
            self._engine = create_db_engine(self.settings.DATABASE_URL, echo=self.settings.DATABASE_ECHO)
            logger.info(f"Database engine created for {self._engine.url.render_as_string(hide_password=True)}")
        return self._engine

    @property
    def thread_pool_service(self) -> ThreadPoolService:
        if self._thread_pool_service is None:
            self._thread_pool_service = ThreadPoolService(
                cpu_workers=self.settings.CPU_WORKERS,
                io_workers=self.settings.IO_WORKERS,
            )
        return self._thread_pool_service

    @property
    def query_service(self) -> QueryService:
        """Get or create the QueryService with engine and thread pool dependencies."""
        if self._query_service is None:
            self._query_service = QueryService(
                self.engine,
                asset_dir=self.settings.map_asset_path,
                asset_extension=self.settings.MAP_ASSET_EXTENSION,
                thread_pool_service=self.thread_pool_service,
            )
            logger.info("QueryService created and injected")
        return self._query_service

    @property
    def observer(self) -> RegionQueryObserver:
        if self._observer is None:
            self._observer = LoggingRegionQueryObserver()
        return self._observer

    async def close(self):
        """Close all managed resources."""
        if self._thread_pool_service is not None:
            self._thread_pool_service.close()
            self._thread_pool_service = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self._query_service = None
        logger.info("ServiceContainer closed all managed services")


# Global container instance (initialized at startup)
_service_container: Optional[ServiceContainer] = None


def get_service_container() -> ServiceContainer:
    """Get the global service container instance."""
    if _service_container is None:
        raise RuntimeError("Service container not initialized. Call init_service_container() first.")
    return _service_container


def init_service_container(settings: Settings, engine: Optional[Engine] = None) -> ServiceContainer:
    """Initialize the global service container."""
    global _service_container
    _service_container = ServiceContainer(settings, engine=engine)
    logger.info("Service container initialized successfully")
    return _service_container


async def close_service_container():
    """Close the global service container and clean up all resources."""
    global _service_container
    if _service_container:
        await _service_container.close()
        _service_container = None
        logger.info("Service container closed and reset")


# FastAPI dependency functions
def get_query_service() -> QueryService:
    """FastAPI dependency to get the QueryService instance."""
    return get_service_container().query_service


def get_region_query_observer() -> RegionQueryObserver:
    """FastAPI dependency to get the planning observer."""
    return get_service_container().observer
