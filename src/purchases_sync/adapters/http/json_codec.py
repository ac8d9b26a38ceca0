"""JSON codec that keeps prices exact.

``json.dumps`` has no way to write a ``Decimal`` as a bare number, so objects
and arrays are assembled here and leaves are delegated to ``json``. Decoding
reads every non-integer number as ``Decimal``.
"""

from __future__ import annotations

import json
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping


def _encode_decimal(value: Decimal) -> str:
    if not value.is_finite():
        raise ValueError(f"Cannot encode non-finite decimal {value}")
    return format(value, "f")


def _encode(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if value is None or isinstance(value, (bool, str, int)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Decimal):
        return _encode_decimal(value)
    if isinstance(value, float):
        return _encode_decimal(Decimal(repr(value)))
    if isinstance(value, Mapping):
        items = (f"{json.dumps(str(key), ensure_ascii=False)}:{_encode(item)}" for key, item in value.items())
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_encode(item) for item in value) + "]"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_json(value: Any) -> bytes:
    return _encode(value).encode("utf-8")


def decode_json(data: bytes | str) -> Any:
    """Decode JSON text; raises ``ValueError`` (``json.JSONDecodeError``) when malformed."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return json.loads(data, parse_float=Decimal)
