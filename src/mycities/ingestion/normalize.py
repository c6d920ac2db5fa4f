"""Normalization helpers.

Centralizes defensive parsing of the free-text and numeric fields that
arrive from the spreadsheet-backed API.
"""

from __future__ import annotations

import math
import re
from typing import Any

# One or more consecutive separators collapse into a single split point.
_MULTI_VALUE_SEPARATORS = re.compile(r"[,;/|]+")


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None or math.isinf(parsed):
        return None
    return int(parsed)


def is_valid_coordinate(value: Any) -> bool:
    """Return ``True`` when *value* converts to a finite number."""
    parsed = safe_float(value)
    return parsed is not None and math.isfinite(parsed)


def finite_or_none(value: Any) -> float | None:
    parsed = safe_float(value)
    if parsed is None or not math.isfinite(parsed):
        return None
    return parsed


def normalize_token(value: Any) -> str:
    """Stringify and trim; ``None`` becomes ``""``."""
    if value is None:
        return ""
    return str(value).strip()


def split_multi(value: Any) -> list[str]:
    """Split a multi-valued text field into trimmed tokens.

    ``"1980s, 1990s; 2000s"`` -> ``["1980s", "1990s", "2000s"]``.
    Tokens keep the order they first appear in.
    """
    text = normalize_token(value)
    if not text:
        return []
    tokens = (token.strip() for token in _MULTI_VALUE_SEPARATORS.split(text))
    return [token for token in tokens if token]


def normalize_filter_value(value: str | None) -> str | None:
    """Normalize a filter selection: trimmed text, blank -> ``None``."""
    text = normalize_token(value)
    return text or None
