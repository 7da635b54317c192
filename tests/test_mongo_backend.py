"""
Tests for the MongoDB adapter: generated match documents, aggregation
pipelines, and error translation through a recording fake collection.
"""

import re
from datetime import date
from decimal import Decimal

import pytest
from pymongo.errors import PyMongoError

from salesboard.backends.mongo import MongoBackend, build_match, build_pipeline, to_document
from salesboard.core.exceptions import DataSourceError
from salesboard.core.query import SalesQuery


class RecordingCollection:
    """Stands in for a pymongo Collection and records every call."""

    def __init__(self, documents=None, count=0, distinct_values=None, fail=False):
        self.documents = documents or []
        self.count = count
        self.distinct_values = distinct_values or {}
        self.fail = fail
        self.calls = []

    def _maybe_fail(self):
        if self.fail:
            raise PyMongoError("connection refused")

    def count_documents(self, match):
        self.calls.append(("count_documents", match))
        self._maybe_fail()
        return self.count

    def aggregate(self, pipeline):
        self.calls.append(("aggregate", pipeline))
        self._maybe_fail()
        if "$group" in pipeline[-1]:
            return iter(self.distinct_values.get("$group", []))
        return iter(self.documents)

    def distinct(self, field):
        self.calls.append(("distinct", field))
        self._maybe_fail()
        return self.distinct_values.get(field, [])


def clauses(spec_params):
    return build_match(SalesQuery.from_params(spec_params))["$and"]


class TestBuildMatch:

    def test_no_filters_matches_all(self):
        assert build_match(SalesQuery()) == {}

    def test_search_is_escaped_case_insensitive_regex(self):
        (clause,) = clauses({"search": "a.b"})

        name, phone = clause["$or"]
        assert name == {"customer_name": {"$regex": re.escape("a.b"), "$options": "i"}}
        assert phone["phone_number"]["$options"] == "i"

    def test_list_filters_use_in(self):
        (clause,) = clauses({"gender": "Male,Female"})
        assert clause == {"gender": {"$in": ["Male", "Female"]}}

    def test_tags_match_whole_labels(self):
        (clause,) = clauses({"tags": "Sale"})
        pattern = clause["$or"][0]["tags"]["$regex"]

        assert re.search(pattern, "Electronics, Sale")
        assert re.search(pattern, "Sale")
        assert not re.search(pattern, "Salesforce")

    def test_age_and_date_bounds(self):
        age, dates = clauses({"ageMin": "25", "ageMax": "45", "dateFrom": "2023-01-01", "dateTo": "31-01-2023"})

        assert age == {"age": {"$gte": 25, "$lte": 45}}
        assert dates == {"date": {"$type": "string", "$gte": "2023-01-01", "$lte": "2023-01-31"}}


class TestBuildPipeline:

    def test_window_and_sort(self):
        spec = SalesQuery.from_params({"page": "3", "limit": "5", "sortBy": "customer-za"})
        pipeline = build_pipeline(spec)

        sort = next(stage["$sort"] for stage in pipeline if "$sort" in stage)
        assert list(sort.items()) == [("_name_key", -1), ("id", -1)]
        assert {"$skip": 10} in pipeline
        assert {"$limit": 5} in pipeline

    def test_unknown_sort_is_id_descending(self):
        pipeline = build_pipeline(SalesQuery.from_params({"sortBy": "nope"}))
        sort = next(stage["$sort"] for stage in pipeline if "$sort" in stage)
        assert sort == {"id": -1}


class TestMongoBackend:

    def test_query_maps_documents(self):
        collection = RecordingCollection(
            documents=[{"id": 1, "customer_name": "Asha", "date": "2023-03-15", "final_amount": 99.5}],
            count=12,
        )
        page = MongoBackend(collection).query(SalesQuery.from_params({"search": "as"}))

        assert page.total_records == 12
        assert page.data[0]["Customer Name"] == "Asha"
        assert page.data[0]["Date"] == "2023-03-15"
        assert page.data[0]["Final Amount"] == 99.5
        assert collection.calls[0][0] == "count_documents"

    def test_filter_options(self):
        collection = RecordingCollection(
            distinct_values={
                "customer_region": ["South", None, "North", ""],
                "tags": ["Sale, New", "Gift"],
                "$group": [{"_id": None, "min": 19, "max": 64}],
            }
        )
        options = MongoBackend(collection).filter_options()

        assert options["customerRegions"] == ["North", "South"]
        assert options["tags"] == ["Gift", "New", "Sale"]
        assert options["ageRange"] == {"min": 19, "max": 64}

    def test_errors_become_data_source_errors(self):
        backend = MongoBackend(RecordingCollection(fail=True))

        with pytest.raises(DataSourceError):
            backend.query(SalesQuery())
        with pytest.raises(DataSourceError):
            backend.filter_options()


def test_to_document_is_bson_friendly():
    document = to_document({"id": 3, "date": date(2023, 3, 15), "final_amount": Decimal("12.50"), "tags": None})
    assert document == {"id": 3, "date": "2023-03-15", "final_amount": 12.5, "tags": None}
