# salesboard/ingest.py
#
# CSV -> sales store. Rows without a Transaction ID are skipped and
# counted; anything else is mapped through the field table. A batch the
# store rejects is rolled back, counted as skipped and the load goes on.

import argparse
import logging
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any, NamedTuple

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salesboard.core.exceptions import DataSourceError
from salesboard.core.fields import to_internal
from salesboard.models.sales import Sale


logger = logging.getLogger(__name__)

CSV_CHUNK_SIZE = 5000


class IngestReport(NamedTuple):
    inserted: int
    skipped: int


def read_sales_csv(path: str | Path, chunk_size: int = CSV_CHUNK_SIZE) -> Iterator[dict[str, Any]]:
    """Yield CSV rows keyed by header name, every value kept as text."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise DataSourceError(f"CSV file not found: {csv_path}")

    try:
        reader = pd.read_csv(
            csv_path,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            chunksize=chunk_size,
        )
    except pd.errors.EmptyDataError as exc:
        raise DataSourceError(f"CSV file is empty: {csv_path}") from exc

    with reader:
        try:
            for chunk in reader:
                chunk.columns = [str(column).strip() for column in chunk.columns]
                yield from chunk.to_dict("records")
        except pd.errors.ParserError as exc:
            raise DataSourceError(f"Malformed CSV {csv_path}: {exc}") from exc


def iter_internal_records(path: str | Path, counter: dict[str, int]) -> Iterator[dict[str, Any]]:
    for line_number, row in enumerate(read_sales_csv(path), start=2):
        if not str(row.get("Transaction ID") or "").strip():
            counter["skipped"] += 1
            logger.warning(f"Skipping CSV line {line_number}: missing Transaction ID")
            continue
        yield to_internal(row)


def load_csv_records(path: str | Path) -> list[dict[str, Any]]:
    """Full dataset in internal form, ids assigned in file order from 1."""
    counter = {"skipped": 0}
    records = []

    for record in iter_internal_records(path, counter):
        record["id"] = len(records) + 1
        records.append(record)

    if counter["skipped"]:
        logger.warning(f"{counter['skipped']} CSV rows skipped while loading {path}")

    return records


def _batches(records: Iterator[dict[str, Any]], batch_size: int) -> Iterator[list[dict[str, Any]]]:
    batch = []
    for record in records:
        batch.append(record)
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


def load_csv_into_db(
    db: Session,
    path: str | Path,
    batch_size: int = 1000,
    truncate: bool = True,
) -> IngestReport:
    counter = {"skipped": 0}
    inserted = 0
    start_time = time.perf_counter()

    if truncate:
        try:
            existing = db.query(Sale).count()
            if existing:
                logger.info(f"Clearing {existing} existing sales records")
                db.query(Sale).delete()
                db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise DataSourceError(f"Could not clear existing sales records: {exc}") from exc

    for batch_number, batch in enumerate(
        _batches(iter_internal_records(path, counter), batch_size), start=1
    ):
        try:
            db.bulk_insert_mappings(Sale, batch)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            counter["skipped"] += len(batch)
            logger.warning(f"Batch {batch_number} failed, {len(batch)} records skipped: {exc}")
            continue

        inserted += len(batch)
        logger.info(f"Batch {batch_number}: {len(batch)} records | Total: {inserted}")

    duration = round(time.perf_counter() - start_time, 2)
    logger.info(
        f"Upload complete: {inserted} inserted, {counter['skipped']} skipped, {duration}s"
    )
    return IngestReport(inserted=inserted, skipped=counter["skipped"])


def load_csv_into_collection(
    collection,
    path: str | Path,
    batch_size: int = 1000,
    truncate: bool = True,
) -> IngestReport:
    from pymongo.errors import BulkWriteError, PyMongoError

    from salesboard.backends.mongo import to_document

    counter = {"skipped": 0}
    inserted = 0

    try:
        if truncate:
            collection.delete_many({})
            next_id = 1
        else:
            last = collection.find_one(sort=[("id", -1)])
            next_id = (last["id"] if last else 0) + 1
    except PyMongoError as exc:
        raise DataSourceError(f"Could not prepare sales collection: {exc}") from exc

    for batch_number, batch in enumerate(
        _batches(iter_internal_records(path, counter), batch_size), start=1
    ):
        documents = []
        for record in batch:
            record["id"] = next_id
            next_id += 1
            documents.append(to_document(record))

        try:
            collection.insert_many(documents, ordered=False)
        except BulkWriteError as exc:
            written = exc.details.get("nInserted", 0)
            inserted += written
            counter["skipped"] += len(documents) - written
            logger.warning(
                f"Batch {batch_number}: {len(documents) - written} documents rejected"
            )
            continue
        except PyMongoError as exc:
            counter["skipped"] += len(documents)
            logger.warning(f"Batch {batch_number} failed, {len(documents)} documents skipped: {exc}")
            continue

        inserted += len(documents)
        logger.info(f"Inserted {inserted} documents")

    try:
        collection.create_index([("id", -1)])
        collection.create_index("customer_name")
        collection.create_index("date")
    except PyMongoError as exc:
        raise DataSourceError(f"Could not index sales collection: {exc}") from exc

    logger.info(f"Upload complete: {inserted} inserted, {counter['skipped']} skipped")
    return IngestReport(inserted=inserted, skipped=counter["skipped"])


def main(argv: list[str] | None = None) -> int:
    from salesboard.core.config import settings
    from salesboard.database import Base, SessionLocal, engine

    parser = argparse.ArgumentParser(description="Load a sales CSV into the configured store")
    parser.add_argument("csv_path", nargs="?", default=settings.CSV_PATH)
    parser.add_argument("--batch-size", type=int, default=settings.INGEST_BATCH_SIZE)
    parser.add_argument("--keep", action="store_true", help="append instead of replacing existing rows")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    if settings.SALES_BACKEND == "mongo":
        from pymongo import MongoClient

        client = MongoClient(settings.MONGO_URL)
        try:
            collection = client[settings.MONGO_DB][settings.MONGO_COLLECTION]
            report = load_csv_into_collection(
                collection, args.csv_path, args.batch_size, truncate=not args.keep
            )
        finally:
            client.close()
    else:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            report = load_csv_into_db(db, args.csv_path, args.batch_size, truncate=not args.keep)
        finally:
            db.close()

    print(f"Inserted: {report.inserted}  Skipped: {report.skipped}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
