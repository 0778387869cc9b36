"""
Thread Pool Service

Runs query planning on a CPU thread pool and blocking row-store queries and
filesystem checks on a separate I/O thread pool, so async endpoints never
block the event loop.
"""

import asyncio
import functools
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

import psutil

logger = logging.getLogger(__name__)


class ThreadPoolService:
    """Lazily created CPU and I/O thread pools with explicit lifecycle management"""

    def __init__(self, cpu_workers: Optional[int] = None, io_workers: Optional[int] = None):
        """
        Args:
            cpu_workers: Number of threads for CPU-bound tasks (default: CPU cores)
            io_workers: Number of threads for I/O-bound tasks (default: CPU cores * 4, capped at 32)
        """
        self.cpu_cores = os.cpu_count() or 4
        self.cpu_workers = cpu_workers or self.cpu_cores
        self.io_workers = io_workers or min(self.cpu_cores * 4, 32)
        self._cpu_pool: Optional[ThreadPoolExecutor] = None
        self._io_pool: Optional[ThreadPoolExecutor] = None

        logger.info(f"ThreadPoolService configured: CPU workers={self.cpu_workers}, I/O workers={self.io_workers}")

    @property
    def cpu_pool(self) -> ThreadPoolExecutor:
        """Get or create the CPU-bound thread pool"""
        if self._cpu_pool is None:
            self._cpu_pool = ThreadPoolExecutor(
                max_workers=self.cpu_workers,
                thread_name_prefix="galaxy-cpu"
            )
            logger.info(f"CPU thread pool created with {self.cpu_workers} workers")
        return self._cpu_pool

    @property
    def io_pool(self) -> ThreadPoolExecutor:
        """Get or create the I/O-bound thread pool"""
        if self._io_pool is None:
            self._io_pool = ThreadPoolExecutor(
                max_workers=self.io_workers,
                thread_name_prefix="galaxy-io"
            )
            logger.info(f"I/O thread pool created with {self.io_workers} workers")
        return self._io_pool

    async def run_cpu_task(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute a CPU-bound task (bounding box decomposition, filter construction)
        in the CPU pool.

        Exceptions raised by ``func`` propagate to the caller unchanged.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.cpu_pool, functools.partial(func, *args, **kwargs))

    async def run_io_task(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute an I/O-bound task (database query, file check) in the I/O pool.

        Exceptions raised by ``func`` propagate to the caller unchanged.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.io_pool, functools.partial(func, *args, **kwargs))

    def get_pool_stats(self) -> dict:
        """Get thread pool statistics for monitoring"""
        stats = {
            "cpu_pool": {
                "max_workers": self.cpu_workers,
                "active": self._cpu_pool is not None,
            },
            "io_pool": {
                "max_workers": self.io_workers,
                "active": self._io_pool is not None,
            },
            "system_info": {
                "cpu_cores": self.cpu_cores,
                "memory_gb": round(psutil.virtual_memory().total / (1024**3), 2),
            }
        }
        if self._cpu_pool is not None:
            stats["cpu_pool"]["threads"] = len(getattr(self._cpu_pool, '_threads', ()))
        if self._io_pool is not None:
            stats["io_pool"]["threads"] = len(getattr(self._io_pool, '_threads', ()))
        return stats

    def close(self):
        """Shutdown the thread pools and cleanup resources"""
        if self._cpu_pool is not None:
            self._cpu_pool.shutdown(wait=True, cancel_futures=False)
            self._cpu_pool = None
            logger.info("CPU thread pool shutdown completed")
        if self._io_pool is not None:
            self._io_pool.shutdown(wait=True, cancel_futures=False)
            self._io_pool = None
            logger.info("I/O thread pool shutdown completed")
