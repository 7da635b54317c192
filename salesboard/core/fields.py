# salesboard/core/fields.py
#
# Field table between the CSV header names used on the wire
# ("Customer Name") and the snake_case storage columns (customer_name).

import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


FIELD_MAP: dict[str, str] = {
    "Transaction ID": "transaction_id",
    "Date": "date",
    "Customer ID": "customer_id",
    "Customer Name": "customer_name",
    "Phone Number": "phone_number",
    "Gender": "gender",
    "Age": "age",
    "Customer Region": "customer_region",
    "Customer Type": "customer_type",
    "Product ID": "product_id",
    "Product Name": "product_name",
    "Brand": "brand",
    "Product Category": "product_category",
    "Tags": "tags",
    "Quantity": "quantity",
    "Price per Unit": "price_per_unit",
    "Discount Percentage": "discount_percentage",
    "Total Amount": "total_amount",
    "Final Amount": "final_amount",
    "Payment Method": "payment_method",
    "Order Status": "order_status",
    "Delivery Type": "delivery_type",
    "Store ID": "store_id",
    "Store Location": "store_location",
    "Salesperson ID": "salesperson_id",
    "Employee Name": "employee_name",
}

INTERNAL_TO_EXTERNAL: dict[str, str] = {v: k for k, v in FIELD_MAP.items()}

EXTERNAL_FIELDS = tuple(FIELD_MAP)
INTERNAL_FIELDS = tuple(FIELD_MAP.values())

INTEGER_FIELDS = frozenset({"age", "quantity"})
DECIMAL_FIELDS = frozenset(
    {"price_per_unit", "discount_percentage", "total_amount", "final_amount"}
)
DATE_FIELDS = frozenset({"date"})

DATE_FORMATS = (
    "%d-%m-%Y",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
)

_NON_DIGIT = re.compile(r"[^\d.]")
_NON_DECIMAL = re.compile(r"[^0-9.\-]")


def to_internal_name(external: str) -> str:
    return FIELD_MAP[external]


def to_external_name(internal: str) -> str:
    return INTERNAL_TO_EXTERNAL[internal]


def coerce_int(value: Any) -> int:
    """Non-negative integer from loose input; 0 when nothing usable is left."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, (float, Decimal)):
        return max(int(value), 0)

    # "12.5" keeps its integer part, "1,234" loses the separator
    digits = _NON_DIGIT.sub("", str(value)).split(".")[0]
    return int(digits) if digits else 0


def coerce_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))

    cleaned = _NON_DECIMAL.sub("", str(value))
    if not cleaned:
        return Decimal("0")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def parse_date(value: Any) -> Optional[date]:
    """Calendar date from a DD-MM-YYYY, ISO or slash-separated string."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def split_tags(value: Any) -> list[str]:
    if not value:
        return []
    return [tag.strip() for tag in str(value).split(",") if tag.strip()]


def join_tags(value: Any) -> Optional[str]:
    """Canonical stored form: labels trimmed and joined with ", "."""
    if value is None:
        return None
    return ", ".join(split_tags(value))


def _read(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def _external_value(key: str, value: Any) -> Any:
    if value is None:
        return None
    if key in DATE_FIELDS:
        parsed = parse_date(value)
        return parsed.isoformat() if parsed else str(value)
    if key in INTEGER_FIELDS:
        return int(value)
    if key in DECIMAL_FIELDS:
        return float(value)
    return value


def to_external(record: Any) -> dict[str, Any]:
    """Render a stored record (row mapping or ORM object) with all 26 wire keys."""
    return {
        external: _external_value(internal, _read(record, internal))
        for external, internal in FIELD_MAP.items()
    }


def to_internal(row: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a CSV-style row into the stored representation."""
    record: dict[str, Any] = {}

    for external, internal in FIELD_MAP.items():
        raw = row.get(external)

        if internal in INTEGER_FIELDS:
            record[internal] = coerce_int(raw)
        elif internal in DECIMAL_FIELDS:
            record[internal] = coerce_decimal(raw)
        elif internal in DATE_FIELDS:
            record[internal] = parse_date(raw)
        elif internal == "tags":
            record[internal] = join_tags(raw)
        else:
            record[internal] = raw

    return record
