# salesboard/core/filter_options.py

from collections.abc import Iterable
from typing import Any, Optional

from salesboard.core.fields import split_tags


DEFAULT_AGE_RANGE = {"min": 18, "max": 100}

# response key -> internal column
OPTION_FIELDS: dict[str, str] = {
    "customerRegions": "customer_region",
    "genders": "gender",
    "productCategories": "product_category",
    "paymentMethods": "payment_method",
    "orderStatuses": "order_status",
    "deliveryTypes": "delivery_type",
}


def distinct_sorted(values: Iterable[Any]) -> list[str]:
    return sorted({str(v) for v in values if v is not None and str(v) != ""})


def distinct_tags(tag_strings: Iterable[Any]) -> list[str]:
    tags = set()
    for value in tag_strings:
        tags.update(split_tags(value))
    return sorted(tags)


def age_range(min_age: Optional[int], max_age: Optional[int]) -> dict[str, int]:
    if min_age is None or max_age is None:
        return dict(DEFAULT_AGE_RANGE)
    return {"min": int(min_age), "max": int(max_age)}


def build_filter_options(
    columns: dict[str, Iterable[Any]],
    tag_strings: Iterable[Any],
    min_age: Optional[int],
    max_age: Optional[int],
) -> dict[str, Any]:
    """Assemble the option payload from raw per-column values.

    ``columns`` is keyed by internal column name; each backend supplies
    either every value or the distinct values its store returned.
    """
    options: dict[str, Any] = {
        key: distinct_sorted(columns.get(column, ()))
        for key, column in OPTION_FIELDS.items()
    }
    options["tags"] = distinct_tags(tag_strings)
    options["ageRange"] = age_range(min_age, max_age)
    return options


def extract_filter_options(records: list[dict[str, Any]]) -> dict[str, Any]:
    ages = [r["age"] for r in records if isinstance(r.get("age"), int)]

    return build_filter_options(
        columns={
            column: [r.get(column) for r in records]
            for column in OPTION_FIELDS.values()
        },
        tag_strings=(r.get("tags") for r in records),
        min_age=min(ages) if ages else None,
        max_age=max(ages) if ages else None,
    )
