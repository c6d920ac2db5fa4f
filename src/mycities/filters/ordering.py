"""Sort keys for the filter dropdowns.

Stay durations are human-friendly labels ("1 mo", "3-5 mos", "> 20 yrs")
built around a one-month minimum stay; they sort by an approximate month
count rather than alphabetically.  Decades sort chronologically by their
leading year.
"""

from __future__ import annotations

import math
import re
from typing import Any

from mycities.ingestion.normalize import normalize_token

# Checked in order; the first match wins.
_GREATER_THAN_YEARS = re.compile(r">\s*(\d+)\s*yr")
_MONTH_RANGE = re.compile(r"(\d+)\s*-\s*(\d+)\s*mo")
_MONTHS = re.compile(r"(\d+)\s*mo")
_YEAR_RANGE = re.compile(r"(\d+)\s*-\s*(\d+)\s*yr")
_YEARS = re.compile(r"(\d+)\s*yr")

_DIGIT_RUNS = re.compile(r"(\d+)")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

NaturalKey = tuple[str | int, ...]


def duration_sort_key(label: Any) -> float:
    """Map a stay-duration label to an approximate length in months.

    Unrecognized labels return ``inf`` so they sort last.
    """
    text = normalize_token(label).lower()
    if not text:
        return math.inf

    match = _GREATER_THAN_YEARS.match(text)
    if match:
        # Half a year past the bucket so "> 20 yrs" follows "20 yrs".
        return (int(match.group(1)) + 0.5) * 12

    match = _MONTH_RANGE.match(text)
    if match:
        return float(match.group(1))

    match = _MONTHS.match(text)
    if match:
        return float(match.group(1))

    match = _YEAR_RANGE.match(text)
    if match:
        return float(int(match.group(1)) * 12)

    match = _YEARS.match(text)
    if match:
        return float(int(match.group(1)) * 12)

    return math.inf


def natural_sort_key(text: str) -> NaturalKey:
    """Case-insensitive, numeric-aware key ("2 mos" < "10 mos").

    Even positions hold text chunks and odd positions digit runs, so two
    keys always compare like with like.
    """
    parts = _DIGIT_RUNS.split(text)
    return tuple(int(part) if index % 2 else part.casefold() for index, part in enumerate(parts))


def stay_duration_sort_key(label: str) -> tuple[float, NaturalKey, str]:
    return (duration_sort_key(label), natural_sort_key(label), label)


def leading_int(token: str) -> int | None:
    match = _LEADING_INT.match(token)
    if match is None:
        return None
    return int(match.group(1))


def decade_sort_key(token: str) -> tuple[int, int, NaturalKey, str]:
    """Year-leading tokens first in chronological order, then the rest lexically."""
    year = leading_int(token)
    if year is None:
        return (1, 0, natural_sort_key(token), token)
    return (0, year, natural_sort_key(token), token)
