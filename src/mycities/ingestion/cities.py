"""Turn raw city payloads into the store's valid working set."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from mycities.ingestion.normalize import is_valid_coordinate
from mycities.models.city import CityRecord

_logger = logging.getLogger(__name__)


def has_valid_coordinates(lat: Any, lon: Any) -> bool:
    """Accept a lat/lon pair iff both convert to finite numbers."""
    return is_valid_coordinate(lat) and is_valid_coordinate(lon)


def _to_record(item: Any) -> CityRecord | None:
    if isinstance(item, CityRecord):
        return item
    if not isinstance(item, Mapping):
        return None
    try:
        return CityRecord.model_validate(dict(item))
    except ValidationError:
        _logger.debug("City payload failed validation: %r", item, exc_info=True)
        return None


def parse_city_records(items: Iterable[Any] | None) -> list[CityRecord]:
    """Parse raw payload items, keeping only records with finite coordinates.

    Items may be mappings (decoded JSON) or already-built
    :class:`CityRecord` instances.  Dropped items are logged at debug
    level; each kind of drop is then summarized with one warning.
    """
    not_objects = 0
    bad_coordinates = 0
    valid: list[CityRecord] = []
    for index, item in enumerate(items or ()):
        record = _to_record(item)
        if record is None:
            not_objects += 1
            _logger.debug("Dropping city at index %d: not a city object", index)
            continue
        if not has_valid_coordinates(record.lat, record.lon):
            bad_coordinates += 1
            _logger.debug(
                "Dropping city at index %d (%s): invalid coordinates lat=%r lon=%r",
                index,
                record.city or "?",
                record.lat,
                record.lon,
            )
            continue
        valid.append(record)

    if bad_coordinates:
        _logger.warning("Filtered out %d cities due to invalid coordinates", bad_coordinates)
    if not_objects:
        _logger.warning("Skipped %d payload items that are not city objects", not_objects)
    return valid
