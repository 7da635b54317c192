# salesboard/backends/sql.py
#
# SalesQuery -> parameterized SQLAlchemy query. Works against SQLite
# and PostgreSQL.

import logging
from typing import Any

from sqlalchemy import String, distinct, func, literal, or_, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salesboard.backends.base import SalesBackend, SalesPage, build_summary
from salesboard.core.exceptions import DataSourceError
from salesboard.core.fields import to_external
from salesboard.core.filter_options import OPTION_FIELDS, build_filter_options
from salesboard.core.query import SalesQuery, SortOption
from salesboard.models.sales import Sale


logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _normalized_tags():
    # ",a,b," so each tag can be matched as ",tag,"
    trimmed = func.replace(
        func.replace(func.trim(func.coalesce(Sale.tags, "")), ", ", ",", type_=String),
        " ,",
        ",",
        type_=String,
    )
    return func.lower(literal(",", String) + trimmed + literal(",", String))


def build_conditions(spec: SalesQuery) -> list:
    conditions = []

    if spec.search:
        pattern = f"%{escape_like(spec.search)}%"
        conditions.append(
            or_(
                Sale.customer_name.ilike(pattern, escape=LIKE_ESCAPE),
                Sale.phone_number.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    for column, allowed in spec.filters.items():
        conditions.append(getattr(Sale, column).in_(allowed))

    if spec.tags:
        tags = _normalized_tags()
        conditions.append(
            or_(
                *[
                    tags.like(f"%,{escape_like(tag.lower())},%", escape=LIKE_ESCAPE)
                    for tag in spec.tags
                ]
            )
        )

    if spec.age_min is not None:
        conditions.append(Sale.age >= spec.age_min)
    if spec.age_max is not None:
        conditions.append(Sale.age <= spec.age_max)

    if spec.date_from is not None:
        conditions.append(Sale.date >= spec.date_from)
    if spec.date_to is not None:
        conditions.append(Sale.date <= spec.date_to)

    return conditions


def build_ordering(sort_by: SortOption) -> list:
    customer_key = func.lower(func.coalesce(Sale.customer_name, ""))

    ordering = {
        SortOption.DATE_NEWEST: [Sale.date.desc().nulls_last()],
        SortOption.DATE_OLDEST: [Sale.date.asc().nulls_last()],
        SortOption.QUANTITY_HIGH: [Sale.quantity.desc()],
        SortOption.QUANTITY_LOW: [Sale.quantity.asc()],
        SortOption.AMOUNT_HIGH: [Sale.final_amount.desc()],
        SortOption.CUSTOMER_AZ: [customer_key.asc()],
        SortOption.CUSTOMER_ZA: [customer_key.desc()],
    }.get(sort_by, [])

    return ordering + [Sale.id.desc()]


class SqlBackend(SalesBackend):
    name = "sql"

    def __init__(self, db: Session):
        self.db = db

    def query(self, spec: SalesQuery) -> SalesPage:
        try:
            base_query = self.db.query(Sale).filter(*build_conditions(spec))

            total_records = base_query.count()

            rows = (
                base_query
                .order_by(*build_ordering(spec.sort_by))
                .limit(spec.limit)
                .offset(spec.offset)
                .all()
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DataSourceError(f"Sales query failed: {exc}") from exc

        return SalesPage(data=[to_external(row) for row in rows], total_records=total_records)

    def filter_options(self) -> dict[str, Any]:
        try:
            columns = {}
            for column in OPTION_FIELDS.values():
                attr = getattr(Sale, column)
                columns[column] = [
                    value
                    for (value,) in self.db.query(distinct(attr))
                    .filter(attr.isnot(None), attr != "")
                    .all()
                ]

            tag_strings = [
                value
                for (value,) in self.db.query(distinct(Sale.tags))
                .filter(Sale.tags.isnot(None))
                .all()
            ]

            min_age, max_age = self.db.query(func.min(Sale.age), func.max(Sale.age)).one()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DataSourceError(f"Filter option query failed: {exc}") from exc

        return build_filter_options(columns, tag_strings, min_age, max_age)

    def summarize(self, spec: SalesQuery) -> dict[str, Any]:
        try:
            units, revenue, discount, count = (
                self.db.query(
                    func.coalesce(func.sum(Sale.quantity), 0),
                    func.coalesce(func.sum(Sale.final_amount), 0),
                    func.coalesce(func.sum(Sale.total_amount - Sale.final_amount), 0),
                    func.count(Sale.id),
                )
                .filter(*build_conditions(spec))
                .one()
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DataSourceError(f"Sales summary failed: {exc}") from exc

        return build_summary(units, revenue, discount, count)

    def ping(self) -> bool:
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True
