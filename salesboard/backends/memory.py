# salesboard/backends/memory.py
#
# Filter -> sort -> paginate over the cached CSV dataset.

import logging
from decimal import Decimal
from typing import Any

from salesboard.backends.base import SalesBackend, SalesPage, build_summary
from salesboard.core.cache import SalesCache
from salesboard.core.exceptions import DataSourceError
from salesboard.core.fields import split_tags, to_external
from salesboard.core.filter_options import extract_filter_options
from salesboard.core.query import SalesQuery, SortOption


logger = logging.getLogger(__name__)


def matches(record: dict[str, Any], spec: SalesQuery) -> bool:
    if spec.search:
        term = spec.search.lower()
        name = str(record.get("customer_name") or "").lower()
        phone = str(record.get("phone_number") or "").lower()
        if term not in name and term not in phone:
            return False

    for column, allowed in spec.filters.items():
        if str(record.get(column) or "") not in allowed:
            return False

    if spec.tags:
        record_tags = {tag.lower() for tag in split_tags(record.get("tags"))}
        wanted = {tag.lower() for tag in spec.tags}
        if record_tags.isdisjoint(wanted):
            return False

    age = record.get("age") or 0
    if spec.age_min is not None and age < spec.age_min:
        return False
    if spec.age_max is not None and age > spec.age_max:
        return False

    if spec.has_date_bounds:
        sale_date = record.get("date")
        if sale_date is None:
            return False
        if spec.date_from is not None and sale_date < spec.date_from:
            return False
        if spec.date_to is not None and sale_date > spec.date_to:
            return False

    return True


def sort_records(records: list[dict[str, Any]], sort_by: SortOption) -> list[dict[str, Any]]:
    # Identifier descending first; the stable sorts below keep it as tie-break
    ordered = sorted(records, key=lambda r: r["id"], reverse=True)

    if sort_by in (SortOption.DATE_NEWEST, SortOption.DATE_OLDEST):
        dated = [r for r in ordered if r.get("date") is not None]
        undated = [r for r in ordered if r.get("date") is None]
        dated.sort(key=lambda r: r["date"], reverse=sort_by == SortOption.DATE_NEWEST)
        return dated + undated

    if sort_by in (SortOption.QUANTITY_HIGH, SortOption.QUANTITY_LOW):
        ordered.sort(
            key=lambda r: r.get("quantity") or 0,
            reverse=sort_by == SortOption.QUANTITY_HIGH,
        )
    elif sort_by == SortOption.AMOUNT_HIGH:
        ordered.sort(key=lambda r: r.get("final_amount") or Decimal("0"), reverse=True)
    elif sort_by in (SortOption.CUSTOMER_AZ, SortOption.CUSTOMER_ZA):
        ordered.sort(
            key=lambda r: str(r.get("customer_name") or "").casefold(),
            reverse=sort_by == SortOption.CUSTOMER_ZA,
        )

    return ordered


class MemoryBackend(SalesBackend):
    name = "memory"

    def __init__(self, cache: SalesCache):
        self.cache = cache

    def _matching(self, spec: SalesQuery) -> list[dict[str, Any]]:
        records = self.cache.load()
        if spec.is_empty:
            return list(records)
        return [record for record in records if matches(record, spec)]

    def query(self, spec: SalesQuery) -> SalesPage:
        filtered = self._matching(spec)
        ordered = sort_records(filtered, spec.sort_by)
        window = ordered[spec.offset:spec.offset + spec.limit]

        return SalesPage(
            data=[to_external(record) for record in window],
            total_records=len(filtered),
        )

    def filter_options(self) -> dict[str, Any]:
        return extract_filter_options(self.cache.load())

    def summarize(self, spec: SalesQuery) -> dict[str, Any]:
        filtered = self._matching(spec)

        units = sum(r.get("quantity") or 0 for r in filtered)
        revenue = sum((r.get("final_amount") or Decimal("0") for r in filtered), Decimal("0"))
        gross = sum((r.get("total_amount") or Decimal("0") for r in filtered), Decimal("0"))

        return build_summary(units, revenue, gross - revenue, len(filtered))

    def ping(self) -> bool:
        try:
            self.cache.load()
        except DataSourceError:
            logger.exception("Sales dataset unavailable")
            return False
        return True

    def clear_cache(self) -> int:
        return self.cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        return self.cache.stats()
