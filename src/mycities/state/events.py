"""Load lifecycle states published by the city store."""

from __future__ import annotations

from enum import StrEnum


class LoadState(StrEnum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"
