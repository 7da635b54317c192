# salesboard/core/exceptions.py


class SalesboardError(Exception):
    """Base error for the sales dashboard backend."""


class DataSourceError(SalesboardError):
    """Raised when a sales data source is missing, unreachable or malformed."""
