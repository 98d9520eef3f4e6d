"""Conversion of driver values into JSON-compatible structures."""
import base64
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional
from uuid import UUID


def to_jsonable(value: Any, fallback: Optional[Callable[[Any], Any]] = None) -> Any:
    """
    Convert a driver value (row, document or scalar) into JSON-compatible data.

    Binary values become base64 text, temporal values ISO 8601 strings and
    decimals their exact string form. Non-finite floats become None.
    Values of any other type are passed to ``fallback`` when given,
    otherwise they are rendered with ``str()``.
    """
    if isinstance(value, dict):
        return {str(key): to_jsonable(item, fallback) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(item, fallback) for item in value]
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if fallback is not None:
        return fallback(value)
    return str(value)
