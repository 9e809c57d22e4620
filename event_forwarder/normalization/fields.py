"""
Typed field access for decoded message records.

Records are plain dicts produced by the precision-preserving decoder in
``event_forwarder.ingestion.decoding``: integer literals are Python ``int``
and other numbers are ``Decimal``. Every accessor here is total and returns
the caller's default on a missing or mis-typed value.
"""

from __future__ import annotations

import copy
import ipaddress
import logging
from decimal import Decimal
from typing import Any

logger = logging.getLogger(__name__)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def is_number(value: Any) -> bool:
    """Return True for decoded JSON numbers (bool is not a number here)."""
    return isinstance(value, (int, Decimal)) and not isinstance(value, bool)


def as_int32(value: Any) -> int | None:
    """
    Interpret a decoded number as a signed 32-bit integer.

    Returns None for non-integer literals (decoded as ``Decimal``) and for
    integers that do not fit in 32 bits.
    """
    if not is_number(value) or isinstance(value, Decimal):
        return None
    if INT32_MIN <= value <= INT32_MAX:
        return value
    return None


def ipv4_from_signed(value: int) -> str:
    """
    Decode a signed 32-bit integer into dotted-quad notation.

    The sensor reports IPv4 addresses as signed network-order integers,
    so negative values map to the upper half of the address space:
    ``-1062731520`` is ``0xC0A80100``, i.e. ``192.168.1.0``.
    """
    return str(ipaddress.IPv4Address(value & 0xFFFFFFFF))


def get_string(record: dict[str, Any], key: str, default: str = "") -> str:
    """Return ``record[key]`` if it is a string, else ``default``."""
    value = record.get(key)
    if isinstance(value, str):
        return value
    return default


def get_number(record: dict[str, Any], key: str, default: int | Decimal = 0) -> int | Decimal:
    """Return ``record[key]`` if it is a decoded number, else ``default``."""
    value = record.get(key)
    if is_number(value):
        return value
    return default


def get_ip_address(record: dict[str, Any], key: str, default: str = "") -> str:
    """
    Return an IPv4 address field as a string.

    Numeric values are decoded as signed 32-bit integers, strings are
    passed through unchanged, anything else yields ``default``.
    """
    value = record.get(key)
    if isinstance(value, str):
        return value
    ip = as_int32(value)
    if ip is not None:
        return ipv4_from_signed(ip)
    return default


def get_bool(record: dict[str, Any], key: str) -> bool | None:
    """Return ``record[key]`` if it is a bool, else None (absent)."""
    value = record.get(key)
    if isinstance(value, bool):
        return value
    return None


def deep_copy(value: Any) -> Any:
    """Structural deep clone so output records never alias their input."""
    return copy.deepcopy(value)


def get_object(record: dict[str, Any], key: str) -> dict[str, Any]:
    """
    Return a deep copy of a nested mapping, or a fresh empty mapping.

    Used for fields that are carried through unchanged (``scores``,
    ``watchlists``, ``observed_filename``...).
    """
    value = record.get(key)
    if isinstance(value, dict):
        return deep_copy(value)
    return {}


def get_string_list(record: dict[str, Any], key: str) -> list[str]:
    """Return the string elements of a list field, in order."""
    value = record.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def upper_md5(value: Any) -> Any:
    """Upper-case a 32-character MD5 string; return anything else unchanged."""
    if isinstance(value, str) and len(value) == 32:
        return value.upper()
    return value
