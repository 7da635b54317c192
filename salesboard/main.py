# Main application file



import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from salesboard.core.cache import SalesCache
from salesboard.core.config import settings
from salesboard.core.rate_limiter import limiter
from salesboard.database import Base, engine
from salesboard.ingest import load_csv_records
from salesboard.routers import health, sales


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("salesboard")


# STORAGE LIFECYCLE

@asynccontextmanager
async def lifespan(app: FastAPI):
    client = None

    if settings.SALES_BACKEND == "sql":
        Base.metadata.create_all(bind=engine)

    elif settings.SALES_BACKEND == "mongo":
        from pymongo import MongoClient

        client = MongoClient(settings.MONGO_URL)
        app.state.sales_collection = client[settings.MONGO_DB][settings.MONGO_COLLECTION]

    logger.info(f"Sales backend: {settings.SALES_BACKEND}")

    yield

    if client is not None:
        client.close()


# APP INIT

app = FastAPI(
    title="Retail Sales Dashboard API",
    description="Search, filter, sort and page through retail sales records",
    version="1.0.0",
    lifespan=lifespan,
)

# The dataset cache belongs to the app; only the memory backend reads it
app.state.sales_cache = SalesCache(lambda: load_csv_records(settings.CSV_PATH))


# CORS

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=r"https://.*\.vercel\.app",
    allow_credentials=True,
    allow_methods=["GET", "DELETE"],
    allow_headers=["Content-Type"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} "
        f"Time: {duration}ms"
    )

    return response


# ERROR HANDLERS

@app.exception_handler(404)
async def route_not_found(request: Request, exc):
    return JSONResponse(
        status_code=404,
        content={"status": "error", "message": "Route not found"},
    )


@app.exception_handler(Exception)
async def internal_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "Internal server error",
            "error": str(exc) if settings.DEBUG else None,
        },
    )


# ROUTERS

app.include_router(sales.router)
app.include_router(health.router)


# ROOT

@app.get("/")
def root():
    return {"message": "Retail Sales Dashboard API is running"}
