"""Reactive city store.

This is the only component allowed to write city state.  Map views read
through its read-only channels and change it through its methods.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from mycities._constants import DEFAULT_BASEMAP_MODE, LOAD_ERROR_MESSAGE
from mycities.config import MyCitiesConfig
from mycities.exceptions import CitiesLoadError
from mycities.filters.compose import filter_cities
from mycities.filters.lists import build_filter_lists
from mycities.ingestion.cities import parse_city_records
from mycities.ingestion.normalize import normalize_filter_value
from mycities.models.city import CityRecord
from mycities.state.channels import ReadOnlyChannel, ValueChannel
from mycities.state.events import LoadState

_logger = logging.getLogger(__name__)


class CitySource(Protocol):
    """Structural interface for the "get all cities" collaborator.

    :class:`mycities.client.MyCitiesClient` is the production
    implementation; tests pass small fakes.
    """

    async def get_all_cities(self) -> Sequence[Mapping[str, Any] | CityRecord]:
        ...


class CityStore:
    """Single source of truth for the loaded cities and the filter state.

    Usage::

        async with MyCitiesClient(config) as client:
            store = CityStore.from_config(client, config)
            await store.ensure_loaded()
            store.set_decade_filter("1990s")
            visible = store.filtered_cities.value

    Channels publish tuples, so readers cannot change store state.
    Concurrent :meth:`ensure_loaded` calls share one fetch.  Derived lists
    and the filtered view are recomputed in full on every change.
    """

    def __init__(self, source: CitySource, *, basemap_mode: str = DEFAULT_BASEMAP_MODE) -> None:
        self._source = source

        self._cities: ValueChannel[tuple[CityRecord, ...]] = ValueChannel((), name="cities")
        self._loading: ValueChannel[bool] = ValueChannel(False, name="loading")
        self._error: ValueChannel[str | None] = ValueChannel(None, name="error")
        self._load_state: ValueChannel[LoadState] = ValueChannel(LoadState.EMPTY, name="load_state")
        self._stay_durations: ValueChannel[tuple[str, ...]] = ValueChannel((), name="stay_durations")
        self._decades: ValueChannel[tuple[str, ...]] = ValueChannel((), name="decades")
        self._stay_duration_filter: ValueChannel[str | None] = ValueChannel(None, name="stay_duration_filter")
        self._decade_filter: ValueChannel[str | None] = ValueChannel(None, name="decade_filter")
        self._basemap_mode: ValueChannel[str] = ValueChannel(basemap_mode, name="basemap_mode")
        self._filtered_cities: ValueChannel[tuple[CityRecord, ...]] = ValueChannel((), name="filtered_cities")

        self._load_once: asyncio.Task[tuple[CityRecord, ...]] | None = None
        # Bumped by refresh(); a fetch started under an older generation
        # still resolves for its own waiters but never writes store state.
        self._generation = 0
        self._fetch_count = 0

    @classmethod
    def from_config(cls, source: CitySource, config: MyCitiesConfig) -> CityStore:
        return cls(source, basemap_mode=config.default_basemap)

    # ------------------------------------------------------------------
    # Read-only channels
    # ------------------------------------------------------------------

    @property
    def cities(self) -> ReadOnlyChannel[tuple[CityRecord, ...]]:
        """Valid cities (finite coordinates only)."""
        return self._cities.as_readonly()

    @property
    def filtered_cities(self) -> ReadOnlyChannel[tuple[CityRecord, ...]]:
        return self._filtered_cities.as_readonly()

    @property
    def loading(self) -> ReadOnlyChannel[bool]:
        return self._loading.as_readonly()

    @property
    def error(self) -> ReadOnlyChannel[str | None]:
        return self._error.as_readonly()

    @property
    def load_state(self) -> ReadOnlyChannel[LoadState]:
        return self._load_state.as_readonly()

    @property
    def stay_durations(self) -> ReadOnlyChannel[tuple[str, ...]]:
        return self._stay_durations.as_readonly()

    @property
    def decades(self) -> ReadOnlyChannel[tuple[str, ...]]:
        return self._decades.as_readonly()

    @property
    def stay_duration_filter(self) -> ReadOnlyChannel[str | None]:
        return self._stay_duration_filter.as_readonly()

    @property
    def decade_filter(self) -> ReadOnlyChannel[str | None]:
        return self._decade_filter.as_readonly()

    @property
    def basemap_mode(self) -> ReadOnlyChannel[str]:
        return self._basemap_mode.as_readonly()

    @property
    def fetch_count(self) -> int:
        """Number of fetches issued to the source so far."""
        return self._fetch_count

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def ensure_loaded(self) -> list[CityRecord]:
        """Return the cities, fetching them at most once.

        Returns the cached list when cities are already loaded, joins the
        in-flight fetch when there is one, and otherwise starts a new one.

        Raises
        ------
        CitiesLoadError
            If the fetch fails.  Every waiter of that fetch receives the
            same exception; the next call retries.
        """
        existing = self._cities.value
        if existing:
            return list(existing)

        task = self._load_once
        if task is None:
            self._loading.emit(True)
            self._error.emit(None)
            self._load_state.emit(LoadState.LOADING)
            task = asyncio.get_running_loop().create_task(self._load(self._generation))
            self._load_once = task

        # Shield so a cancelled waiter does not cancel the shared fetch.
        result = await asyncio.shield(task)
        return list(result)

    async def refresh(self) -> list[CityRecord]:
        """Drop cached cities and derived lists, then fetch again."""
        self._generation += 1
        self._load_once = None
        self._cities.emit(())
        self._stay_durations.emit(())
        self._decades.emit(())
        self._recompute_filtered()
        return await self.ensure_loaded()

    async def _load(self, generation: int) -> tuple[CityRecord, ...]:
        self._fetch_count += 1
        _logger.debug("Fetching cities (fetch #%d)", self._fetch_count)
        try:
            raw = await self._source.get_all_cities()
            cities = tuple(parse_city_records(raw))
            if generation == self._generation:
                self._cities.emit(cities)
                self._rebuild_filter_lists(cities)
                self._recompute_filtered()
                self._load_state.emit(LoadState.LOADED)
                _logger.info("Loaded %d cities", len(cities))
            else:
                _logger.debug("Discarding result of superseded fetch (%d cities)", len(cities))
            return cities
        except Exception as exc:
            _logger.warning("Failed to load cities: %s", exc)
            if generation == self._generation:
                self._error.emit(LOAD_ERROR_MESSAGE)
                # Reset so a later call can retry.
                self._load_once = None
                self._load_state.emit(LoadState.ERROR)
            raise CitiesLoadError(LOAD_ERROR_MESSAGE) from exc
        finally:
            if generation == self._generation:
                self._loading.emit(False)

    def _rebuild_filter_lists(self, cities: tuple[CityRecord, ...]) -> None:
        lists = build_filter_lists(cities)
        self._stay_durations.emit(lists.stay_durations)
        self._decades.emit(lists.decades)

    # ------------------------------------------------------------------
    # Filters and basemap
    # ------------------------------------------------------------------

    def set_stay_duration_filter(self, value: str | None) -> None:
        self._stay_duration_filter.emit(normalize_filter_value(value))
        self._recompute_filtered()

    def set_decade_filter(self, value: str | None) -> None:
        self._decade_filter.emit(normalize_filter_value(value))
        self._recompute_filtered()

    def clear_filters(self) -> None:
        self._stay_duration_filter.emit(None)
        self._decade_filter.emit(None)
        self._recompute_filtered()

    def set_basemap_mode(self, mode: str) -> None:
        """Publish a basemap mode for the map views; the store does not interpret it."""
        self._basemap_mode.emit(mode)

    def _recompute_filtered(self) -> None:
        cities = self._cities.value
        stay = self._stay_duration_filter.value
        decade = self._decade_filter.value
        filtered = tuple(filter_cities(cities, stay, decade))
        _logger.debug(
            "Combining %d cities with filters stay=%r decade=%r -> %d",
            len(cities),
            stay,
            decade,
            len(filtered),
        )
        self._filtered_cities.emit(filtered)
