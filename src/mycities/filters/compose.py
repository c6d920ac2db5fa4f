"""Filtered city view."""

from __future__ import annotations

from collections.abc import Iterable

from mycities.ingestion.normalize import normalize_token, split_multi
from mycities.models.city import CityRecord


def matches_filters(city: CityRecord, stay_duration: str | None, decade: str | None) -> bool:
    if stay_duration and normalize_token(city.stay_duration) != stay_duration:
        return False
    return not decade or decade in split_multi(city.decades)


def filter_cities(
    cities: Iterable[CityRecord] | None,
    stay_duration: str | None = None,
    decade: str | None = None,
) -> list[CityRecord]:
    """Return a new list of the cities matching both selections.

    ``None`` (or an empty string) for a selection means no constraint on
    that field.  Decades are matched per token, so ``"2000s"`` matches a
    city whose decades read ``"1990s, 2000s"``.
    """
    if cities is None:
        return []
    return [city for city in cities if matches_filters(city, stay_duration, decade)]
