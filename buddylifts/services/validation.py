"""
Utilities for reading and validating JSON request payloads.

Every helper raises `BadRequest` with a field-specific message, so blueprints
can stay at "validate input, check ownership, write, return".
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from flask import request

from ..errors import BadRequest

_MISSING = object()


def json_body() -> Dict[str, Any]:
    """Request body as dict (leer, wenn kein JSON gesendet wurde)."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def require_str(
    data: Dict[str, Any],
    key: str,
    message: Optional[str] = None,
    min_len: int = 1,
    max_len: Optional[int] = None,
    min_message: Optional[str] = None,
    max_message: Optional[str] = None,
) -> str:
    raw = data.get(key)
    if not isinstance(raw, str):
        raise BadRequest(message or f"{key} is required")
    value = raw.strip()
    if len(value) < min_len:
        raise BadRequest(min_message or message or f"{key} is required")
    if max_len is not None and len(value) > max_len:
        raise BadRequest(max_message or f"{key} is too long")
    return value


def optional_str(data: Dict[str, Any], key: str, min_len: int = 0) -> Optional[str]:
    raw = data.get(key, _MISSING)
    if raw is _MISSING or raw is None:
        return None
    if not isinstance(raw, str):
        raise BadRequest(f"{key} must be a string")
    value = raw.strip()
    if len(value) < min_len:
        raise BadRequest(f"{key} must not be empty")
    return value


def require_int(
    data: Dict[str, Any],
    key: str,
    minimum: Optional[int] = None,
    message: Optional[str] = None,
) -> int:
    raw = data.get(key)
    if not _is_int(raw):
        raise BadRequest(f"{key} must be an integer")
    if minimum is not None and raw < minimum:
        raise BadRequest(message or f"{key} must be at least {minimum}")
    return raw


def optional_int(
    data: Dict[str, Any],
    key: str,
    minimum: Optional[int] = None,
    message: Optional[str] = None,
) -> Optional[int]:
    if data.get(key) is None:
        return None
    return require_int(data, key, minimum, message)


def optional_number(data: Dict[str, Any], key: str, minimum: Optional[float] = None) -> Optional[float]:
    raw = data.get(key)
    if raw is None:
        return None
    if not _is_number(raw):
        raise BadRequest(f"{key} must be a number")
    if minimum is not None and raw < minimum:
        raise BadRequest(f"{key} must not be negative" if minimum == 0 else f"{key} must be at least {minimum}")
    return float(raw)


def require_choice(
    data: Dict[str, Any],
    key: str,
    choices: Iterable[str],
    message: Optional[str] = None,
) -> str:
    choices = tuple(choices)
    raw = data.get(key)
    if raw not in choices:
        raise BadRequest(message or f"{key} must be one of: {', '.join(choices)}")
    return raw


def optional_bool(data: Dict[str, Any], key: str, default: bool = False) -> bool:
    raw = data.get(key)
    if raw is None:
        return default
    if not isinstance(raw, bool):
        raise BadRequest(f"{key} must be a boolean")
    return raw


def require_int_list(data: Dict[str, Any], key: str, min_items: int = 1) -> List[int]:
    """Liste nicht-negativer Ganzzahlen, z. B. completed_reps = [10, 8, 10]."""
    raw = data.get(key)
    if not isinstance(raw, list) or len(raw) < min_items:
        raise BadRequest(f"{key} must contain at least {min_items} value{'s' if min_items != 1 else ''}")
    values: List[int] = []
    for item in raw:
        if not _is_number(item) or item < 0 or int(item) != item:
            raise BadRequest(f"{key} must only contain non-negative whole numbers")
        values.append(int(item))
    return values
