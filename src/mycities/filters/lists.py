"""Derived dropdown option lists."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from mycities.filters.ordering import decade_sort_key, stay_duration_sort_key
from mycities.ingestion.normalize import normalize_token, split_multi
from mycities.models.city import CityRecord


class FilterLists(BaseModel):
    """Unique, sorted filter options derived from the valid city set."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stay_durations: tuple[str, ...] = ()
    decades: tuple[str, ...] = ()


def build_filter_lists(cities: Iterable[CityRecord]) -> FilterLists:
    """Recompute both option lists from scratch."""
    stays: set[str] = set()
    decades: set[str] = set()

    for city in cities:
        # Stay duration is always a single value.
        stay = normalize_token(city.stay_duration)
        if stay:
            stays.add(stay)
        decades.update(split_multi(city.decades))

    return FilterLists(
        stay_durations=tuple(sorted(stays, key=stay_duration_sort_key)),
        decades=tuple(sorted(decades, key=decade_sort_key)),
    )
