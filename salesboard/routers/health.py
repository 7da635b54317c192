# salesboard/routers/health.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from salesboard.backends.base import SalesBackend
from salesboard.core.dependencies import get_backend

router = APIRouter(tags=["Health"])


@router.get("/health")
def health(backend: SalesBackend = Depends(get_backend)):
    timestamp = datetime.now(timezone.utc).isoformat()

    if not backend.ping():
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "message": "Data source connection failed",
                "timestamp": timestamp,
                "database": "disconnected",
            },
        )

    body = {
        "status": "success",
        "message": "Retail Sales API is running",
        "timestamp": timestamp,
        "database": "connected",
    }

    cache = backend.cache_stats()
    if cache is not None:
        body["cache"] = cache

    return body
