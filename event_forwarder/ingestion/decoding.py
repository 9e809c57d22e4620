"""Precision-preserving JSON decoding of message bodies."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

import simplejson

from event_forwarder.errors import MalformedMessageError


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not allowed")


def decode_json(body: bytes | str) -> Any:
    """
    Decode a JSON document without ever passing numbers through float.

    Integer literals become ``int`` (arbitrary precision), every other
    number becomes ``Decimal``. ``NaN`` and ``Infinity`` are rejected.
    """
    return json.loads(body, parse_float=Decimal, parse_constant=_reject_constant)


def decode_message(routing_key: str, body: bytes | str) -> dict[str, Any]:
    """
    Decode a message body into a record.

    Raises:
        MalformedMessageError: the body is not UTF-8 JSON or not an object.
    """
    try:
        record = decode_json(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedMessageError(routing_key, str(e)) from e

    if not isinstance(record, dict):
        raise MalformedMessageError(
            routing_key, f"expected a JSON object, got {type(record).__name__}"
        )
    return record


def _exact_numbers(value: Any) -> Any:
    # integral exponent literals such as 1E+30 are written as plain integers
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return value
    if isinstance(value, dict):
        return {k: _exact_numbers(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_exact_numbers(v) for v in value]
    return value


def encode_json(record: Any, **kwargs: Any) -> str:
    """
    Serialize a normalized record.

    Numbers are written exactly: integers (including integral ``Decimal``
    values) as integer literals, other ``Decimal`` values digit for digit.
    """
    return simplejson.dumps(
        _exact_numbers(record), use_decimal=True, ensure_ascii=False, **kwargs
    )
