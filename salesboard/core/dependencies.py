# salesboard/core/dependencies.py

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from salesboard.backends.base import SalesBackend
from salesboard.backends.memory import MemoryBackend
from salesboard.backends.sql import SqlBackend
from salesboard.core.config import settings
from salesboard.database import get_db


def get_backend(request: Request, db: Session = Depends(get_db)) -> SalesBackend:
    """Storage adapter selected by SALES_BACKEND."""
    if settings.SALES_BACKEND == "memory":
        return MemoryBackend(request.app.state.sales_cache)

    if settings.SALES_BACKEND == "mongo":
        from salesboard.backends.mongo import MongoBackend

        return MongoBackend(request.app.state.sales_collection)

    return SqlBackend(db)
