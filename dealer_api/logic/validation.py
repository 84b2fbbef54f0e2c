"""Input normalisation for vehicle submissions, identifiers and paging."""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from dealer_api.errors import InvalidIdentifier, NonNumericValue, ValidationError
from dealer_api.logic.models import NewCar, Supplier

IDENTIFIER_RE = re.compile(r"^[0-9a-f]{32}$")
DEFAULT_OFFSET = 0
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_STORED_INTEGER = 2**31 - 1

REQUIRED_CAR_FIELDS = ("name", "price", "quantity", "image", "description", "supplier")
REQUIRED_SUPPLIER_FIELDS = ("name", "ownerId")


def validate_identifier(value: Any) -> str:
    if value is None or value == "":
        raise InvalidIdentifier("Missing id")
    if not isinstance(value, str) or not IDENTIFIER_RE.match(value):
        raise InvalidIdentifier(f"Malformed id: {value!r}")
    return value


def parse_new_car(data: Any) -> NewCar:
    """Validate a raw car submission and coerce its numeric fields."""
    if not isinstance(data, Mapping):
        raise ValidationError("Car data must be an object")
    missing = [field for field in REQUIRED_CAR_FIELDS if _is_blank(data.get(field))]
    supplier = data.get("supplier")
    if isinstance(supplier, Mapping):
        missing += [f"supplier.{field}" for field in REQUIRED_SUPPLIER_FIELDS if _is_blank(supplier.get(field))]
    elif "supplier" not in missing:
        missing.append("supplier")
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")

    price = _to_number(data["price"], "price")
    quantity = _to_integer(data["quantity"], "quantity")
    if price <= 0:
        raise ValidationError("price must be greater than zero")
    if quantity < 0:
        raise ValidationError("quantity cannot be negative")

    return NewCar(
        name=str(data["name"]).strip(),
        price=price,
        quantity=quantity,
        image=str(data["image"]).strip(),
        description=str(data["description"]).strip(),
        supplier=Supplier(name=str(supplier["name"]).strip(), owner_id=str(supplier["ownerId"])),
        include_in_slider=_to_flag(data.get("isSlider")),
    )


def parse_restock_amount(value: Any) -> int:
    try:
        amount = _to_integer(value, "restockBy")
    except NonNumericValue as exc:
        raise ValidationError(str(exc)) from exc
    if amount <= 0:
        raise ValidationError("restockBy must be a positive integer")
    return amount


def normalize_window(offset: Any, limit: Any) -> tuple[int, int]:
    """Coerce an offset/limit pair, falling back to (0, 10) for junk."""
    start = _coerce_or_default(offset, DEFAULT_OFFSET)
    size = _coerce_or_default(limit, DEFAULT_PAGE_SIZE)
    if size <= 0:
        size = DEFAULT_PAGE_SIZE
    return max(start, 0), min(size, MAX_PAGE_SIZE)


def page_to_window(page: Any, size: Any) -> tuple[int, int]:
    """Translate zero-based page/size query values into an offset/limit pair."""
    page_number, limit = normalize_window(page, size)
    return min(page_number * limit, MAX_STORED_INTEGER), limit


def _coerce_or_default(value: Any, default: int) -> int:
    try:
        return _to_integer(value, "value")
    except NonNumericValue:
        return default


def _to_number(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise NonNumericValue(f"{field} must be numeric")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise NonNumericValue(f"{field} must be numeric") from exc
    if not math.isfinite(number):
        raise NonNumericValue(f"{field} must be numeric")
    return number


def _to_integer(value: Any, field: str) -> int:
    number = _to_number(value, field)
    if not number.is_integer():
        raise NonNumericValue(f"{field} must be a whole number")
    if abs(number) > MAX_STORED_INTEGER:
        raise NonNumericValue(f"{field} is out of range")
    return int(number)


def _to_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
