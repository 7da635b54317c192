"""
HTTP tests for the sales endpoints, run against both backends.
"""

import pytest
from fastapi.testclient import TestClient

from salesboard.backends.base import SalesBackend
from salesboard.core.dependencies import get_backend
from salesboard.core.exceptions import DataSourceError
from salesboard.main import app


class BrokenBackend(SalesBackend):
    name = "broken"

    def query(self, spec):
        raise DataSourceError("connection refused")

    def filter_options(self):
        raise DataSourceError("connection refused")

    def summarize(self, spec):
        raise DataSourceError("connection refused")

    def ping(self):
        return False


@pytest.fixture
def broken_client():
    app.dependency_overrides[get_backend] = lambda: BrokenBackend()
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestListSales:

    def test_response_shape(self, client):
        response = client.get("/api/sales", params={"limit": "2", "gender": "Male"})
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 2
        assert "Customer Name" in body["data"][0]
        assert body["pagination"] == {
            "currentPage": 1,
            "pageSize": 2,
            "totalPages": 1,
            "totalRecords": 2,
            "hasNextPage": False,
            "hasPrevPage": False,
        }
        assert body["filters"]["applied"] == {
            "gender": "Male",
            "sortBy": "date-newest",
            "page": 1,
            "limit": 2,
        }

    def test_applied_echoes_parsed_values(self, client):
        response = client.get(
            "/api/sales",
            params=[("customerRegion", "North"), ("customerRegion", "East"), ("ageMin", "x"), ("limit", "500")],
        )

        assert response.json()["filters"]["applied"] == {
            "customerRegion": "North,East",
            "sortBy": "date-newest",
            "page": 1,
            "limit": 100,
        }

    def test_data_alias_route(self, client):
        response = client.get("/api/sales/data", params={"search": "bob"})
        assert response.status_code == 200
        assert [r["Transaction ID"] for r in response.json()["data"]] == ["T0001"]

    def test_malformed_numbers_do_not_fail(self, client):
        response = client.get("/api/sales", params={"page": "abc", "limit": "-1", "ageMin": "x"})

        assert response.status_code == 200
        pagination = response.json()["pagination"]
        assert pagination["currentPage"] == 1
        assert pagination["pageSize"] == 10
        assert pagination["totalRecords"] == 4

    def test_out_of_range_page(self, client):
        response = client.get("/api/sales", params={"page": "5"})

        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["hasPrevPage"] is True
        assert body["pagination"]["hasNextPage"] is False

    def test_backend_failure_is_500(self, broken_client):
        response = broken_client.get("/api/sales")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to fetch sales data",
            "error": "connection refused",
        }


class TestFilterOptions:

    def test_filters(self, client):
        body = client.get("/api/sales/filters").json()

        assert body["success"] is True
        assert body["data"] == {
            "customerRegions": ["East", "North", "South", "West"],
            "genders": ["Female", "Male"],
            "productCategories": ["Clothing", "Electronics"],
            "paymentMethods": ["Cash", "UPI"],
            "tags": ["Clearance", "Electronics", "Sale"],
            "orderStatuses": ["Completed", "Returned"],
            "deliveryTypes": ["Express", "Standard"],
            "ageRange": {"min": 20, "max": 50},
        }

    def test_failure(self, broken_client):
        response = broken_client.get("/api/sales/filters")
        assert response.status_code == 500
        assert response.json()["message"] == "Failed to fetch filter options"


class TestStats:

    def test_stats_follow_filters(self, client):
        body = client.get("/api/sales/stats", params={"customerRegion": "South"}).json()
        assert body["data"] == {
            "totalUnits": 1,
            "totalRevenue": 250.0,
            "totalDiscount": 750.0,
            "totalRecords": 1,
        }


class TestCacheAndHealth:

    def test_clear_cache(self, client, backend):
        client.get("/api/sales")
        body = client.delete("/api/sales/cache").json()

        assert body["success"] is True
        assert body["backend"] == backend.name
        if backend.name == "memory":
            assert body["recordsFreed"] == 4
            assert body["cache"] == {"cached": False, "records": 0, "loadSeconds": None}
        else:
            assert body["recordsFreed"] == 0
            assert body["cache"] is None

    def test_health(self, client, backend):
        response = client.get("/health")
        assert response.status_code == 200

        body = response.json()
        assert body["database"] == "connected"
        if backend.name == "memory":
            assert body["cache"]["cached"] is True
            assert body["cache"]["records"] == 4
        else:
            assert "cache" not in body

    def test_health_failure(self, broken_client):
        response = broken_client.get("/health")
        assert response.status_code == 500
        assert response.json()["status"] == "error"


def test_unknown_route(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Route not found"}
