"""
Conversion of raw request parameter strings into typed attribute values.

Every failure raises `CoercionError`; callers treat it as a local failure that
drops the single filter (or search term) it belongs to.
"""

import enum
import math
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from dateutil.parser import isoparse

from querybind.core.exceptions import CoercionError

from .attributes import TypeTag

FLOAT32_MAX = 3.4028234663852886e38
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _coerce_integer(raw: str, value_type: TypeTag) -> int:
    text = raw.strip()
    if not text.lstrip("+-").isdigit():
        raise CoercionError(raw, value_type.value)
    try:
        value = int(text, 10)
    except ValueError as e:
        raise CoercionError(raw, value_type.value) from e

    if not INT64_MIN <= value <= INT64_MAX:
        raise CoercionError(raw, value_type.value, "value is out of range for a 64-bit integer")

    if value_type is TypeTag.UNSIGNED_INTEGER and value < 0:
        raise CoercionError(raw, value_type.value, "value must not be negative")
    return value


def _coerce_floating(raw: str, value_type: TypeTag) -> float:
    try:
        value = float(raw.strip())
    except ValueError as e:
        raise CoercionError(raw, value_type.value) from e

    if not math.isfinite(value):
        raise CoercionError(raw, value_type.value, "value must be finite")
    if value_type is TypeTag.FLOAT and abs(value) > FLOAT32_MAX:
        raise CoercionError(raw, value_type.value, "value is out of range for a 32-bit float")
    return value


def _coerce_boolean(raw: str) -> bool:
    text = raw.strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise CoercionError(raw, TypeTag.BOOLEAN.value, "expected 'true' or 'false'")


def _coerce_decimal(raw: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as e:
        raise CoercionError(raw, TypeTag.DECIMAL.value) from e

    if not value.is_finite():
        raise CoercionError(raw, TypeTag.DECIMAL.value, "value must be finite")
    return value


def _coerce_datetime(raw: str, value_type: TypeTag) -> date | datetime:
    text = raw.strip()
    if not text:
        raise CoercionError(raw, value_type.value, "empty value")
    try:
        parsed = isoparse(text)
    except (ValueError, OverflowError) as e:
        raise CoercionError(raw, value_type.value, "expected an ISO 8601 value") from e

    if value_type is TypeTag.DATETIME and parsed.tzinfo is not None:
        raise CoercionError(raw, value_type.value, "expected a local date-time without a UTC offset")
    return parsed.date() if value_type is TypeTag.DATE else parsed


def _coerce_enum(raw: str, enum_type: type[enum.Enum] | None) -> enum.Enum:
    if enum_type is None:
        raise CoercionError(raw, TypeTag.ENUM.value, "no enumeration type declared")

    text = raw.strip()
    member = enum_type.__members__.get(text.upper())
    if member is not None:
        return member

    # Fall back to string-valued members, compared case-insensitively
    for candidate in enum_type:
        if isinstance(candidate.value, str) and candidate.value.lower() == text.lower():
            return candidate

    raise CoercionError(raw, enum_type.__name__, f"expected one of {', '.join(enum_type.__members__)}")


def _coerce_uuid(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw.strip())
    except ValueError as e:
        raise CoercionError(raw, TypeTag.UUID.value) from e


def coerce(raw: str, value_type: TypeTag, enum_type: type[enum.Enum] | None = None) -> Any:
    """
    Converts a raw string into a value of the given declared type.

    Args:
        raw (str): The raw request parameter value (or one comma-separated part of it).
        value_type (TypeTag): The declared type of the target attribute.
        enum_type (type[enum.Enum] | None, optional): The enumeration class when
            `value_type` is `TypeTag.ENUM`. Defaults to None.

    Returns:
        Any: The typed value.

    Raises:
        CoercionError: If the value cannot be converted.
    """
    if value_type is TypeTag.STRING:
        return raw
    if value_type in (TypeTag.INTEGER, TypeTag.UNSIGNED_INTEGER):
        return _coerce_integer(raw, value_type)
    if value_type in (TypeTag.FLOAT, TypeTag.DOUBLE):
        return _coerce_floating(raw, value_type)
    if value_type is TypeTag.BOOLEAN:
        return _coerce_boolean(raw)
    if value_type is TypeTag.DECIMAL:
        return _coerce_decimal(raw)
    if value_type in (TypeTag.DATE, TypeTag.DATETIME):
        return _coerce_datetime(raw, value_type)
    if value_type is TypeTag.ENUM:
        return _coerce_enum(raw, enum_type)
    if value_type is TypeTag.UUID:
        return _coerce_uuid(raw)

    raise CoercionError(raw, str(value_type), "unsupported value type")
