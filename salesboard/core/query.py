# salesboard/core/query.py
#
# Storage-agnostic description of one sales listing request:
# predicates, sort key and page window. Every backend adapter
# consumes the same SalesQuery.

from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from salesboard.core.fields import parse_date


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class SortOption(str, Enum):
    DATE_NEWEST = "date-newest"
    DATE_OLDEST = "date-oldest"
    QUANTITY_HIGH = "quantity-high"
    QUANTITY_LOW = "quantity-low"
    AMOUNT_HIGH = "amount-high"
    CUSTOMER_AZ = "customer-az"
    CUSTOMER_ZA = "customer-za"
    DEFAULT = "id-desc"

    @classmethod
    def parse(cls, value: Any) -> "SortOption":
        if value is None or str(value).strip() == "":
            return cls.DATE_NEWEST
        try:
            return cls(str(value).strip())
        except ValueError:
            return cls.DEFAULT


# query parameter -> internal column, exact membership match
LIST_FILTERS: dict[str, str] = {
    "customerRegion": "customer_region",
    "gender": "gender",
    "productCategory": "product_category",
    "paymentMethod": "payment_method",
    "orderStatus": "order_status",
    "deliveryType": "delivery_type",
}


def _split_list(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        value = ",".join(str(v) for v in value)
    return tuple(part.strip() for part in str(value).split(",") if part.strip())


def _parse_optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_positive(value: Any, default: int) -> int:
    parsed = _parse_optional_int(value)
    if parsed is None or parsed < 1:
        return default
    return parsed


def _first(value: Any) -> Any:
    # multi-valued query params only make sense for the list filters
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


class SalesQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: str = ""
    filters: dict[str, tuple[str, ...]] = {}
    tags: tuple[str, ...] = ()
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort_by: SortOption = SortOption.DATE_NEWEST
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        default_limit: int = DEFAULT_LIMIT,
        max_limit: Optional[int] = None,
    ) -> "SalesQuery":
        """Build a query from raw request parameters.

        Malformed numbers and dates fall back to their defaults instead of
        failing the request.
        """
        limit = _parse_positive(_first(params.get("limit")), default_limit)
        if max_limit is not None:
            limit = min(limit, max_limit)

        filters = {}
        for param, column in LIST_FILTERS.items():
            values = _split_list(params.get(param))
            if values:
                filters[column] = values

        return cls(
            search=str(_first(params.get("search")) or "").strip(),
            filters=filters,
            tags=_split_list(params.get("tags")),
            age_min=_parse_optional_int(_first(params.get("ageMin"))),
            age_max=_parse_optional_int(_first(params.get("ageMax"))),
            date_from=parse_date(_first(params.get("dateFrom"))),
            date_to=parse_date(_first(params.get("dateTo"))),
            sort_by=SortOption.parse(_first(params.get("sortBy"))),
            page=_parse_positive(_first(params.get("page")), DEFAULT_PAGE),
            limit=limit,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def has_date_bounds(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    @property
    def is_empty(self) -> bool:
        """True when no predicate narrows the dataset."""
        return not (
            self.search
            or self.filters
            or self.tags
            or self.age_min is not None
            or self.age_max is not None
            or self.has_date_bounds
        )

    def applied(self) -> dict[str, Any]:
        """Effective parameters in request form, as echoed back to clients.

        Only active predicates are listed; the window and sort key always are.
        """
        applied: dict[str, Any] = {}
        if self.search:
            applied["search"] = self.search
        for param, column in LIST_FILTERS.items():
            if column in self.filters:
                applied[param] = ",".join(self.filters[column])
        if self.tags:
            applied["tags"] = ",".join(self.tags)
        if self.age_min is not None:
            applied["ageMin"] = self.age_min
        if self.age_max is not None:
            applied["ageMax"] = self.age_max
        if self.date_from is not None:
            applied["dateFrom"] = self.date_from.isoformat()
        if self.date_to is not None:
            applied["dateTo"] = self.date_to.isoformat()

        applied["sortBy"] = self.sort_by.value
        applied["page"] = self.page
        applied["limit"] = self.limit
        return applied


def total_pages(total_records: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return -(-total_records // limit)


def build_pagination(page: int, limit: int, total_records: int) -> dict[str, Any]:
    pages = total_pages(total_records, limit)
    return {
        "currentPage": page,
        "pageSize": limit,
        "totalPages": pages,
        "totalRecords": total_records,
        "hasNextPage": page < pages,
        "hasPrevPage": page > 1,
    }
