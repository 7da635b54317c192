"""
Pytest configuration and fixtures for the sales dashboard tests.

Provides an in-memory SQLite store, the cached in-memory backend over the
same records, and a FastAPI TestClient wired to either of them.
"""

import os

# Must be set before salesboard.core.config is imported
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salesboard.backends.memory import MemoryBackend
from salesboard.backends.sql import SqlBackend
from salesboard.core.cache import SalesCache
from salesboard.core.dependencies import get_backend
from salesboard.core.fields import to_external_name, to_internal
from salesboard.database import Base
from salesboard.main import app
from salesboard.models.sales import Sale


DEFAULT_ROW = {
    "Transaction ID": "T0001",
    "Date": "15-03-2023",
    "Customer ID": "CUST-001",
    "Customer Name": "Neha Sharma",
    "Phone Number": "9876543210",
    "Gender": "Female",
    "Age": "30",
    "Customer Region": "North",
    "Customer Type": "Returning",
    "Product ID": "PROD-100",
    "Product Name": "Wireless Mouse",
    "Brand": "Logix",
    "Product Category": "Electronics",
    "Tags": "accessories, wireless",
    "Quantity": "2",
    "Price per Unit": "500",
    "Discount Percentage": "10",
    "Total Amount": "1000",
    "Final Amount": "900",
    "Payment Method": "UPI",
    "Order Status": "Completed",
    "Delivery Type": "Standard",
    "Store ID": "ST-01",
    "Store Location": "Delhi",
    "Salesperson ID": "EMP-7",
    "Employee Name": "Ravi Kumar",
}


def make_row(**overrides):
    """External-format row; keyword names use the storage column names."""
    row = dict(DEFAULT_ROW)
    for column, value in overrides.items():
        row[to_external_name(column)] = value
    return row


SAMPLE_ROWS = [
    make_row(transaction_id="T0001", customer_name="Bob", phone_number="9000000001",
             age="20", date="01-01-2023", quantity="5", final_amount="100",
             tags="Electronics, Sale", customer_region="North", gender="Male"),
    make_row(transaction_id="T0002", customer_name="alice", phone_number="9000000002",
             age="35", date="10-02-2023", quantity="1", final_amount="250",
             tags="Sale", customer_region="South", gender="Female"),
    make_row(transaction_id="T0003", customer_name="Charlie", phone_number="9111111111",
             age="50", date="20-03-2023", quantity="3", final_amount="75",
             tags="Clearance", customer_region="East", gender="Male",
             product_category="Clothing", payment_method="Cash"),
    make_row(transaction_id="T0004", customer_name="Dana Alison", phone_number="9222222222",
             age="41", date="not a date", quantity="8", final_amount="990",
             tags="", customer_region="West", gender="Female",
             order_status="Returned", delivery_type="Express"),
]


def build_records(rows):
    records = []
    for index, row in enumerate(rows, start=1):
        record = to_internal(row)
        record["id"] = index
        records.append(record)
    return records


@pytest.fixture
def sample_rows():
    return [dict(row) for row in SAMPLE_ROWS]


@pytest.fixture
def sql_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(sql_session_factory):
    session = sql_session_factory()
    yield session
    session.close()


def seed_session(session, rows):
    records = build_records(rows)
    session.bulk_insert_mappings(Sale, records)
    session.commit()
    return records


@pytest.fixture
def backend_factory(db_session):
    """Build a memory or SQL backend holding the given external rows."""

    def _build(kind, rows):
        if kind == "memory":
            records = build_records(rows)
            return MemoryBackend(SalesCache(lambda: records))
        session = db_session
        session.query(Sale).delete()
        session.commit()
        seed_session(session, rows)
        return SqlBackend(session)

    return _build


@pytest.fixture(params=["memory", "sql"])
def backend(request, backend_factory, sample_rows):
    return backend_factory(request.param, sample_rows)


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_backend] = lambda: backend
    yield TestClient(app)
    app.dependency_overrides.clear()
