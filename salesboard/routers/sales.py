# =========================================================
# SALES ROUTER
#
# Read-only views over the sales dataset:
# - paged listing with search, filters and sorting
# - filter option domains for the dashboard controls
# - totals over the filtered set
# =========================================================

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from salesboard.backends.base import SalesBackend
from salesboard.core.config import settings
from salesboard.core.dependencies import get_backend
from salesboard.core.exceptions import SalesboardError
from salesboard.core.query import SalesQuery, build_pagination
from salesboard.core.rate_limiter import limiter
from salesboard.schemas.sale import (
    CacheClearResponse,
    ErrorResponse,
    FilterOptionsResponse,
    SalesListResponse,
    SalesSummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sales", tags=["Sales"])


def _raw_params(request: Request) -> dict:
    params = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        params[key] = values if len(values) > 1 else values[0]
    return params


def _failure(message: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(message=message, error=str(exc)).model_dump(),
    )


def _parse_query(request: Request) -> SalesQuery:
    return SalesQuery.from_params(
        _raw_params(request),
        default_limit=settings.DEFAULT_PAGE_SIZE,
        max_limit=settings.MAX_PAGE_SIZE,
    )


# =========================================================
# LIST SALES
# =========================================================
@router.get("", response_model=SalesListResponse)
@router.get("/data", response_model=SalesListResponse)
@limiter.limit(settings.RATE_LIMIT)
def list_sales(
    request: Request,
    backend: SalesBackend = Depends(get_backend),
):
    spec = _parse_query(request)

    try:
        page = backend.query(spec)
    except SalesboardError as exc:
        logger.exception("Error in list_sales")
        return _failure("Failed to fetch sales data", exc)

    return {
        "success": True,
        "data": page.data,
        "pagination": build_pagination(spec.page, spec.limit, page.total_records),
        "filters": {"applied": spec.applied()},
    }


# =========================================================
# FILTER OPTIONS
# =========================================================
@router.get("/filters", response_model=FilterOptionsResponse)
@limiter.limit(settings.RATE_LIMIT)
def filter_options(
    request: Request,
    backend: SalesBackend = Depends(get_backend),
):
    try:
        options = backend.filter_options()
    except SalesboardError as exc:
        logger.exception("Error in filter_options")
        return _failure("Failed to fetch filter options", exc)

    return {"success": True, "data": options}


# =========================================================
# SUMMARY OVER THE FILTERED SET
# =========================================================
@router.get("/stats", response_model=SalesSummaryResponse)
@limiter.limit(settings.RATE_LIMIT)
def sales_stats(
    request: Request,
    backend: SalesBackend = Depends(get_backend),
):
    spec = _parse_query(request)

    try:
        summary = backend.summarize(spec)
    except SalesboardError as exc:
        logger.exception("Error in sales_stats")
        return _failure("Failed to compute sales summary", exc)

    return {"success": True, "data": summary}


# =========================================================
# CACHE RESET (memory backend only, no-op otherwise)
# =========================================================
@router.delete("/cache", response_model=CacheClearResponse)
def clear_cache(backend: SalesBackend = Depends(get_backend)):
    freed = backend.clear_cache()
    return {
        "success": True,
        "backend": backend.name,
        "recordsFreed": freed,
        "cache": backend.cache_stats(),
    }
