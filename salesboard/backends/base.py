# salesboard/backends/base.py

from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Optional

from salesboard.core.query import SalesQuery


class SalesPage(NamedTuple):
    data: list[dict[str, Any]]
    total_records: int


def build_summary(units: Any, revenue: Any, discount: Any, count: Any) -> dict[str, Any]:
    return {
        "totalUnits": int(units or 0),
        "totalRevenue": round(float(revenue or 0), 2),
        "totalDiscount": round(float(discount or 0), 2),
        "totalRecords": int(count or 0),
    }


class SalesBackend(ABC):
    """One storage adapter answering SalesQuery requests.

    ``query`` returns a page of external-format records plus the
    pre-pagination match count. Store failures surface as
    DataSourceError.
    """

    name: str = "base"

    @abstractmethod
    def query(self, spec: SalesQuery) -> SalesPage:
        ...

    @abstractmethod
    def filter_options(self) -> dict[str, Any]:
        ...

    @abstractmethod
    def summarize(self, spec: SalesQuery) -> dict[str, Any]:
        """Totals over every record matching ``spec``, ignoring the page window."""

    @abstractmethod
    def ping(self) -> bool:
        ...

    def clear_cache(self) -> int:
        return 0

    def cache_stats(self) -> Optional[dict[str, Any]]:
        """Cache state for adapters that hold the dataset in process."""
        return None
