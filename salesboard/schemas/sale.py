# schemas/sale.py

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class PaginationResponse(BaseModel):
    currentPage: int
    pageSize: int
    totalPages: int
    totalRecords: int
    hasNextPage: bool
    hasPrevPage: bool


class AppliedFilters(BaseModel):
    applied: Dict[str, Any]


class SalesListResponse(BaseModel):
    success: bool = True
    # records keep their CSV header keys ("Customer Name", ...)
    data: List[Dict[str, Any]]
    pagination: PaginationResponse
    filters: AppliedFilters


class AgeRange(BaseModel):
    min: int
    max: int


class FilterOptions(BaseModel):
    customerRegions: List[str]
    genders: List[str]
    productCategories: List[str]
    paymentMethods: List[str]
    tags: List[str]
    orderStatuses: List[str]
    deliveryTypes: List[str]
    ageRange: AgeRange


class FilterOptionsResponse(BaseModel):
    success: bool = True
    data: FilterOptions


class SalesSummary(BaseModel):
    totalUnits: int
    totalRevenue: float
    totalDiscount: float
    totalRecords: int


class SalesSummaryResponse(BaseModel):
    success: bool = True
    data: SalesSummary


class CacheStats(BaseModel):
    cached: bool
    records: int
    loadSeconds: Optional[float] = None


class CacheClearResponse(BaseModel):
    success: bool = True
    backend: str
    recordsFreed: int
    cache: Optional[CacheStats] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
