"""Conversion of arbitrary payloads into canonical :data:`Value` trees."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from ..models import Value


class MalformedMatchValue(ValueError):
    """Raised when a payload cannot be represented as a canonical value tree."""


def to_value(data: Any) -> Value:
    """Normalise *data* into a canonical value tree.

    Pydantic models are dumped in JSON mode, tuples become lists and mapping
    keys must be strings. Anything without a JSON representation raises
    :class:`MalformedMatchValue`.
    """

    if isinstance(data, BaseModel):
        return to_value(data.model_dump(mode="json"))
    if data is None or isinstance(data, (bool, str, int)):
        return data
    if isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            raise MalformedMatchValue(f"Non-finite number: {data!r}")
        return data
    if isinstance(data, Mapping):
        result: dict[str, Value] = {}
        for key, item in data.items():
            if not isinstance(key, str):
                raise MalformedMatchValue(f"Object keys must be strings, got {key!r}")
            result[key] = to_value(item)
        return result
    if isinstance(data, (list, tuple)):
        return [to_value(item) for item in data]
    raise MalformedMatchValue(f"Unsupported value of type {type(data).__name__}")


def drop_nulls(value: Value) -> Value:
    """Recursively remove object members whose value is ``None``."""

    if isinstance(value, dict):
        return {key: drop_nulls(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [drop_nulls(item) for item in value]
    return value


def serialize(value: Value) -> str:
    """Return the canonical serialised form of *value*.

    Compact JSON with sorted keys. Integral floats are written as integers so
    that ``1`` and ``1.0`` serialise identically.
    """

    return json.dumps(
        _collapse_numbers(value),
        separators=(",", ":"),
        sort_keys=True,
        ensure_ascii=False,
        allow_nan=False,
    )


def _collapse_numbers(value: Value) -> Value:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {key: _collapse_numbers(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_collapse_numbers(item) for item in value]
    return value
