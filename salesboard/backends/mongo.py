# salesboard/backends/mongo.py
#
# SalesQuery -> MongoDB match document and aggregation pipeline.
# Documents use the internal field names; ``date`` is stored as an ISO
# "YYYY-MM-DD" string and money fields as doubles.

import logging
import re
from decimal import Decimal
from typing import Any

from pymongo.errors import PyMongoError

from salesboard.backends.base import SalesBackend, SalesPage, build_summary
from salesboard.core.exceptions import DataSourceError
from salesboard.core.fields import to_external
from salesboard.core.filter_options import OPTION_FIELDS, build_filter_options
from salesboard.core.query import SalesQuery, SortOption


logger = logging.getLogger(__name__)

# (sort field, direction) ahead of the id tie-break
SORT_KEYS: dict[SortOption, list[tuple[str, int]]] = {
    SortOption.DATE_NEWEST: [("_missing_date", 1), ("date", -1)],
    SortOption.DATE_OLDEST: [("_missing_date", 1), ("date", 1)],
    SortOption.QUANTITY_HIGH: [("quantity", -1)],
    SortOption.QUANTITY_LOW: [("quantity", 1)],
    SortOption.AMOUNT_HIGH: [("final_amount", -1)],
    SortOption.CUSTOMER_AZ: [("_name_key", 1)],
    SortOption.CUSTOMER_ZA: [("_name_key", -1)],
}


def to_document(record: dict[str, Any]) -> dict[str, Any]:
    """Internal record -> BSON-friendly document."""
    document = {}
    for key, value in record.items():
        if isinstance(value, Decimal):
            value = float(value)
        elif key == "date" and value is not None:
            value = value.isoformat()
        document[key] = value
    return document


def _tag_pattern(tag: str) -> str:
    return rf"(^|,)\s*{re.escape(tag)}\s*(,|$)"


def build_match(spec: SalesQuery) -> dict[str, Any]:
    if spec.is_empty:
        return {}

    clauses: list[dict[str, Any]] = []

    if spec.search:
        term = re.escape(spec.search)
        clauses.append(
            {
                "$or": [
                    {"customer_name": {"$regex": term, "$options": "i"}},
                    {"phone_number": {"$regex": term, "$options": "i"}},
                ]
            }
        )

    for column, allowed in spec.filters.items():
        clauses.append({column: {"$in": list(allowed)}})

    if spec.tags:
        clauses.append(
            {
                "$or": [
                    {"tags": {"$regex": _tag_pattern(tag), "$options": "i"}}
                    for tag in spec.tags
                ]
            }
        )

    age_bounds = {}
    if spec.age_min is not None:
        age_bounds["$gte"] = spec.age_min
    if spec.age_max is not None:
        age_bounds["$lte"] = spec.age_max
    if age_bounds:
        clauses.append({"age": age_bounds})

    if spec.has_date_bounds:
        date_bounds: dict[str, Any] = {"$type": "string"}
        if spec.date_from is not None:
            date_bounds["$gte"] = spec.date_from.isoformat()
        if spec.date_to is not None:
            date_bounds["$lte"] = spec.date_to.isoformat()
        clauses.append({"date": date_bounds})

    if not clauses:
        return {}
    return {"$and": clauses}


def build_pipeline(spec: SalesQuery) -> list[dict[str, Any]]:
    sort = dict(SORT_KEYS.get(spec.sort_by, []))
    sort["id"] = -1

    return [
        {"$match": build_match(spec)},
        {
            "$addFields": {
                "_missing_date": {
                    "$cond": [{"$eq": [{"$type": "$date"}, "string"]}, 0, 1]
                },
                "_name_key": {"$toLower": {"$ifNull": ["$customer_name", ""]}},
            }
        },
        {"$sort": sort},
        {"$skip": spec.offset},
        {"$limit": spec.limit},
        {"$project": {"_id": 0, "_missing_date": 0, "_name_key": 0}},
    ]


class MongoBackend(SalesBackend):
    name = "mongo"

    def __init__(self, collection):
        self.collection = collection

    def query(self, spec: SalesQuery) -> SalesPage:
        try:
            total_records = self.collection.count_documents(build_match(spec))
            documents = list(self.collection.aggregate(build_pipeline(spec)))
        except PyMongoError as exc:
            raise DataSourceError(f"Sales query failed: {exc}") from exc

        return SalesPage(
            data=[to_external(document) for document in documents],
            total_records=total_records,
        )

    def filter_options(self) -> dict[str, Any]:
        try:
            columns = {
                column: self.collection.distinct(column)
                for column in OPTION_FIELDS.values()
            }
            tag_strings = self.collection.distinct("tags")
            ages = list(
                self.collection.aggregate(
                    [{"$group": {"_id": None, "min": {"$min": "$age"}, "max": {"$max": "$age"}}}]
                )
            )
        except PyMongoError as exc:
            raise DataSourceError(f"Filter option query failed: {exc}") from exc

        age_stats = ages[0] if ages else {}
        return build_filter_options(columns, tag_strings, age_stats.get("min"), age_stats.get("max"))

    def summarize(self, spec: SalesQuery) -> dict[str, Any]:
        pipeline = [
            {"$match": build_match(spec)},
            {
                "$group": {
                    "_id": None,
                    "units": {"$sum": "$quantity"},
                    "revenue": {"$sum": "$final_amount"},
                    "discount": {"$sum": {"$subtract": ["$total_amount", "$final_amount"]}},
                    "count": {"$sum": 1},
                }
            },
        ]
        try:
            groups = list(self.collection.aggregate(pipeline))
        except PyMongoError as exc:
            raise DataSourceError(f"Sales summary failed: {exc}") from exc

        totals = groups[0] if groups else {}
        return build_summary(
            totals.get("units"),
            totals.get("revenue"),
            totals.get("discount"),
            totals.get("count"),
        )

    def ping(self) -> bool:
        try:
            self.collection.database.client.admin.command("ping")
        except PyMongoError:
            logger.exception("MongoDB ping failed")
            return False
        return True
