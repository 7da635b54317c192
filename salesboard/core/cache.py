# salesboard/core/cache.py

import logging
import threading
import time
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class SalesCache:
    """Process-scoped read-through cache of the full sales dataset.

    The loader runs at most once until clear() is called. Callers that
    arrive while the first load is running block on the lock and receive
    the same list instead of starting a second load.
    """

    def __init__(self, loader: Callable[[], list[dict[str, Any]]]):
        self._loader = loader
        self._lock = threading.Lock()
        self._data: Optional[list[dict[str, Any]]] = None
        self._load_seconds: Optional[float] = None

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    def load(self) -> list[dict[str, Any]]:
        data = self._data
        if data is not None:
            return data

        with self._lock:
            if self._data is not None:
                return self._data

            start_time = time.perf_counter()
            data = self._loader()
            self._load_seconds = round(time.perf_counter() - start_time, 3)
            self._data = data

            logger.info(
                f"Sales cache loaded: {len(data)} records in {self._load_seconds}s"
            )
            return data

    def clear(self) -> int:
        with self._lock:
            freed = len(self._data) if self._data is not None else 0
            self._data = None
            self._load_seconds = None

        logger.info(f"Sales cache cleared ({freed} records freed)")
        return freed

    def stats(self) -> dict[str, Any]:
        data = self._data
        return {
            "cached": data is not None,
            "records": len(data) if data is not None else 0,
            "loadSeconds": self._load_seconds,
        }
