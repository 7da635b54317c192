# salesboard/core/config.py

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Storage
    SALES_BACKEND: Literal["memory", "sql", "mongo"] = "sql"
    DATABASE_URL: str = "sqlite:///./sales.db"
    CSV_PATH: str = "data/sales_data.csv"

    MONGO_URL: str = "mongodb://localhost:27017"
    MONGO_DB: str = "retail"
    MONGO_COLLECTION: str = "sales"

    # Listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    RATE_LIMIT: str = "120/minute"

    # Ingestion
    INGEST_BATCH_SIZE: int = 1000

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
