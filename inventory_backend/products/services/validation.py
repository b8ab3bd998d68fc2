# products/services/validation.py

"""
Input normalizers shared by the stock services.

HARD RULES:
- Quantities are Decimal with at most 3 decimal places. Extra precision is
  rejected, never rounded. Floats are converted via str() so 0.1 stays 0.1.
- Metadata is an open map of str -> JSON value.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .errors import InvalidStockArgumentError

QTY_PLACES = Decimal("0.001")
MONEY_PLACES = Decimal("0.01")

_JSON_SCALARS = (str, int, float, Decimal, bool, type(None))


def to_quantity(value, *, field_name: str = "quantity") -> Decimal:
    if value is None or value == "":
        raise InvalidStockArgumentError(f"{field_name} is required")

    if isinstance(value, bool):
        # guardrail: bool is an int subclass in Python
        raise InvalidStockArgumentError(f"{field_name} must be a number")

    try:
        qty = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidStockArgumentError(f"{field_name} must be a valid decimal")

    if not qty.is_finite():
        raise InvalidStockArgumentError(f"{field_name} must be finite")

    try:
        normalized = qty.quantize(QTY_PLACES)
    except InvalidOperation:
        raise InvalidStockArgumentError(f"{field_name} is out of range")

    if normalized != qty:
        raise InvalidStockArgumentError(f"{field_name} allows at most 3 decimal places")

    return normalized


def to_money(value, *, field_name: str = "unit_cost") -> Decimal | None:
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        raise InvalidStockArgumentError(f"{field_name} must be a number")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidStockArgumentError(f"{field_name} must be a valid decimal")

    if not amount.is_finite() or amount < 0:
        raise InvalidStockArgumentError(f"{field_name} must be a non-negative number")

    return amount.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def _normalize_json_value(value, *, path: str):
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidStockArgumentError(f"metadata value at {path} must be finite")
        # JSONField cannot encode Decimal; keep it lossless as a string
        return str(value)

    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidStockArgumentError(f"metadata value at {path} must be finite")

    if isinstance(value, _JSON_SCALARS):
        return value

    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(v, path=f"{path}[{i}]") for i, v in enumerate(value)]

    if isinstance(value, dict):
        return normalize_metadata(value, path=path)

    raise InvalidStockArgumentError(
        f"metadata value at {path} has unsupported type {type(value).__name__}"
    )


def normalize_metadata(metadata, *, path: str = "metadata") -> dict:
    if metadata is None:
        return {}

    if not isinstance(metadata, dict):
        raise InvalidStockArgumentError(f"{path} must be an object")

    normalized = {}
    for key, value in metadata.items():
        if not isinstance(key, str):
            raise InvalidStockArgumentError(f"{path} keys must be strings")
        normalized[key] = _normalize_json_value(value, path=f"{path}.{key}")
    return normalized
