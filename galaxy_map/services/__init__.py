from .query_service import QueryService
from .thread_pool_service import ThreadPoolService

__all__ = ["QueryService", "ThreadPoolService"]
