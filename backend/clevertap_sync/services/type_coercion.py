"""Per-field conversion of raw CRM values into CleverTap payload primitives."""

import math
import sys
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Union

from clevertap_sync.exceptions import CoercionError

ExternalValue = Optional[Union[str, int, float, bool]]

TEXT = "Text"
NUMBER = "Number"
DATE = "Date"
DATETIME = "DateTime"
BOOLEAN = "Boolean"

_TRUE_STRINGS = {"true", "1", "yes", "y"}
_FALSE_STRINGS = {"false", "0", "no", "n"}

# log10(2), to estimate the decimal digits of an int from its bit length
_DIGITS_PER_BIT = math.log10(2)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_iso(value: str) -> Union[date, datetime]:
    """Parse 'YYYY-MM-DD' or an ISO-8601 timestamp (Z suffix allowed)."""
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def _exceeds_digit_limit(digits: int) -> bool:
    """Integers longer than the interpreter's int-to-str limit cannot be written as JSON."""
    limit = sys.get_int_max_str_digits()
    return limit > 0 and digits > limit


def to_text(value: Any) -> str:
    if _is_blank(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def to_number(value: Any) -> Optional[Union[int, float]]:
    """Lossless numeric conversion.

    Integral values always come back as ``int``. Fractional values come back as
    ``float`` only if the float reproduces the exact decimal; anything else
    fails instead of silently rounding.
    """
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise CoercionError(f"Boolean {value!r} is not a number", value=value, data_type=NUMBER)
    if isinstance(value, int):
        if _exceeds_digit_limit(int(value.bit_length() * _DIGITS_PER_BIT) + 1):
            raise CoercionError("Integer has too many digits to serialize", data_type=NUMBER)
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise CoercionError(f"Non-finite number {value!r}", value=value, data_type=NUMBER)
        return int(value) if value.is_integer() else value
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise CoercionError(f"Value {value!r} is not numeric", value=value, data_type=NUMBER)
    if not number.is_finite():
        raise CoercionError(f"Non-finite number {value!r}", value=value, data_type=NUMBER)
    if _exceeds_digit_limit(number.adjusted() + 1):
        raise CoercionError(f"Number {value!r} has too many digits to serialize", value=value, data_type=NUMBER)
    if number == number.to_integral_value():
        return int(number)
    as_float = float(number)
    if Decimal(repr(as_float)) != number:
        raise CoercionError(
            f"Number {value!r} cannot be represented without precision loss", value=value, data_type=NUMBER
        )
    return as_float


def to_date(value: Any) -> Optional[str]:
    """Calendar date as 'YYYY-MM-DD'. Datetimes keep their own wall-clock day, never converted to UTC."""
    if _is_blank(value):
        return None
    if isinstance(value, str):
        try:
            value = _parse_iso(value)
        except ValueError:
            raise CoercionError(f"Value {value!r} is not an ISO-8601 date", value=value, data_type=DATE)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raise CoercionError(f"Value {value!r} is not a date", value=value, data_type=DATE)


def to_datetime(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    if isinstance(value, str):
        try:
            value = _parse_iso(value)
        except ValueError:
            raise CoercionError(f"Value {value!r} is not an ISO-8601 timestamp", value=value, data_type=DATETIME)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).isoformat()
    raise CoercionError(f"Value {value!r} is not a timestamp", value=value, data_type=DATETIME)


def to_boolean(value: Any) -> Optional[bool]:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, str)):
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise CoercionError(f"Value {value!r} is not a boolean", value=value, data_type=BOOLEAN)


COERCERS: Dict[str, Callable[[Any], ExternalValue]] = {
    TEXT: to_text,
    NUMBER: to_number,
    DATE: to_date,
    DATETIME: to_datetime,
    BOOLEAN: to_boolean,
}


def coerce(raw_value: Any, data_type: str) -> ExternalValue:
    """Convert ``raw_value`` according to the mapping's declared data type.

    Empty values are emitted, never dropped: ``""`` for Text, ``None`` for
    the other types. Raises CoercionError for values that do not fit.
    """
    coercer = COERCERS.get(data_type)
    if coercer is None:
        raise CoercionError(f"Unsupported data type {data_type!r}", value=raw_value, data_type=data_type)
    return coercer(raw_value)
