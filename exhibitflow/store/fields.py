"""Input coercion for store records.

Callers hand the store loosely typed mappings (parsed JSON, YAML, test
literals). These helpers turn them into field values of the right type or
raise ``ValidationFailed`` naming the offending field.
"""

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Type

from exhibitflow.core.approval.states import ExhibitionProductStatus
from exhibitflow.core.errors import ValidationFailed
from exhibitflow.core.rbac.roles import Role

from .models import (
    Actor,
    Availability,
    Exhibition,
    ExhibitionProduct,
    ExhibitionStatus,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ProductList,
    ProductListItem,
    ProductListStatus,
    field_names,
)


def to_str(value: Any) -> str:
    if value is None:
        raise TypeError("value is required")
    return str(value)


def to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def to_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("boolean is not an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{value} is not a whole number")
    return int(value)


def to_optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def to_optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no", ""):
            return False
        raise ValueError(f"not a boolean: {value!r}")
    return bool(value)


CONVERTERS: Dict[type, Dict[str, Callable[[Any], Any]]] = {
    Actor: {
        "id": to_str, "username": to_str, "role": Role, "full_name": to_str,
    },
    Product: {
        "id": to_str, "name": to_str, "category": to_str, "buying_price": float,
        "quantity": to_int, "unit": to_str, "threshold_value": to_int,
        "expiry_date": to_date, "availability": Availability,
        "image": to_optional_str, "sku": to_optional_str,
        "description": to_optional_str, "approved": to_bool,
    },
    Exhibition: {
        "id": to_str, "exhibition_code": to_str, "name": to_str, "description": to_str,
        "start_date": to_date, "end_date": to_date, "status": ExhibitionStatus,
    },
    ExhibitionProduct: {
        "id": to_str, "exhibition_code": to_str, "product_id": to_str, "quantity": to_int,
        "supplier_id": to_str, "price": to_optional_float,
        "status": ExhibitionProductStatus, "compliance_notes": to_optional_str,
    },
    Order: {
        "id": to_str, "exhibition_code": to_optional_str, "status": OrderStatus,
        "created_at": to_datetime, "exhibition_name": to_optional_str,
        "order_value": to_optional_float, "quantity": lambda v: None if v is None else to_int(v),
        "unit": to_optional_str, "expected_delivery": to_date,
    },
    ProductList: {
        "id": to_str, "exhibition_code": to_str, "supplier_id": to_str,
        "status": ProductListStatus, "created_at": to_datetime,
        "total_quantity": to_int,
    },
    OrderItem: {
        "product_id": to_str, "quantity": to_int,
    },
    ProductListItem: {
        "id": to_str, "product_list_id": to_str, "product_id": to_str,
        "quantity": to_int, "price": float,
    },
}


def convert(
    cls: Type,
    data: Mapping[str, Any],
    *,
    allowed: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Coerce ``data`` into typed keyword arguments for ``cls``.

    Args:
        cls: Target dataclass
        data: Raw field values
        allowed: Field names accepted; defaults to every convertible field

    Raises:
        ValidationFailed: On unknown fields or values that do not convert
    """
    if not isinstance(data, Mapping):
        raise ValidationFailed(f"Expected a mapping of fields, got {type(data).__name__}")

    converters = CONVERTERS[cls]
    accepted = set(allowed) if allowed is not None else set(converters)
    unknown = sorted(set(data) - accepted)
    if unknown:
        raise ValidationFailed(
            f"Unknown or read-only fields for {cls.__name__}: {', '.join(unknown)}",
            details={"fields": unknown},
        )

    result: Dict[str, Any] = {}
    for key, value in data.items():
        try:
            result[key] = converters[key](value)
        except (TypeError, ValueError) as e:
            raise ValidationFailed(
                f"Invalid value for {cls.__name__}.{key}: {value!r}",
                details={"field": key, "reason": to_str(e)},
            ) from e
    return result


def merge(record, partial: Mapping[str, Any], *, read_only: Iterable[str] = ("id",)):
    """Return a copy of ``record`` with ``partial`` merged over it.

    Keys absent from ``partial`` keep their current value.
    """
    cls = type(record)
    allowed = (field_names(cls) & set(CONVERTERS[cls])) - set(read_only)
    return replace(record, **convert(cls, partial, allowed=allowed))


def build(cls: Type, data: Mapping[str, Any]):
    """Construct a ``cls`` record from raw field values.

    Raises:
        ValidationFailed: On bad values or missing required fields
    """
    kwargs = convert(cls, data)
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValidationFailed(
            f"Incomplete {cls.__name__} record: {e}", details={"reason": to_str(e)}
        ) from e
