from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable
from typing import Any

import pytest

from mycities.config import MyCitiesConfig
from mycities.exceptions import CitiesLoadError
from mycities.models.city import CityRecord
from mycities.state.events import LoadState
from mycities.state.store import CityStore


class _FakeSource:
    """Returns queued responses in order; the last one repeats.

    A response may be a list of raw cities, an exception to raise, or a
    future resolving to either.
    """

    def __init__(self, *responses: Any) -> None:
        self.calls = 0
        self._responses = list(responses)

    async def get_all_cities(self) -> Any:
        self.calls += 1
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, asyncio.Future):
            response = await response
        if isinstance(response, BaseException):
            raise response
        return response


def _raw(name: str, *, lat: Any = 1.0, lon: Any = 2.0, stay: str = "", decades: str = "") -> dict[str, Any]:
    return {
        "id": 0,
        "city": name,
        "country": "Country",
        "region": "",
        "lat": lat,
        "lon": lon,
        "stayDuration": stay,
        "decades": decades,
        "notes": None,
    }


def _names(cities: Iterable[CityRecord]) -> list[str]:
    return [c.city for c in cities]


async def _drain() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def test_starts_with_empty_state() -> None:
    store = CityStore(_FakeSource([]))

    assert store.cities.value == ()
    assert store.filtered_cities.value == ()
    assert store.loading.value is False
    assert store.error.value is None
    assert store.load_state.value == LoadState.EMPTY
    assert store.stay_durations.value == ()
    assert store.decades.value == ()
    assert store.stay_duration_filter.value is None
    assert store.decade_filter.value is None
    assert store.basemap_mode.value == "standard"


@pytest.mark.asyncio
async def test_ensure_loaded_filters_invalid_coordinates_and_builds_lists(
    caplog: pytest.LogCaptureFixture,
) -> None:
    gate: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
    source = _FakeSource(gate)
    store = CityStore(source)

    loading_states: list[bool] = []
    store.loading.subscribe(loading_states.append)

    task = asyncio.create_task(store.ensure_loaded())
    await _drain()

    assert loading_states[-1] is True
    assert store.load_state.value == LoadState.LOADING

    gate.set_result(
        [
            _raw("A", lat=34.0, lon=-118.2, stay="1 mo", decades="1990s, 2000s"),
            _raw("B", lat=10.5, lon=20.2, stay="3-5 mos", decades="1980s; 1990s"),
            _raw("BAD1", lat=math.nan, lon=20, stay="2 mos", decades="1970s"),
            _raw("BAD2", lat=10, lon=math.inf, stay="1 yr", decades="2010s"),
        ]
    )
    with caplog.at_level(logging.WARNING, logger="mycities"):
        cities = await task

    assert _names(cities) == ["A", "B"]
    assert _names(store.cities.value) == ["A", "B"]
    assert store.stay_durations.value == ("1 mo", "3-5 mos")
    assert store.decades.value == ("1980s", "1990s", "2000s")
    assert source.calls == 1
    assert loading_states == [False, True, False]
    assert store.load_state.value == LoadState.LOADED
    assert any("Filtered out 2 cities" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch() -> None:
    gate: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
    source = _FakeSource(gate)
    store = CityStore(source)

    tasks = [asyncio.create_task(store.ensure_loaded()) for _ in range(5)]
    await _drain()
    assert source.calls == 1

    gate.set_result([_raw("A")])
    results = await asyncio.gather(*tasks)

    assert source.calls == 1
    assert store.fetch_count == 1
    assert all(_names(result) == ["A"] for result in results)


@pytest.mark.asyncio
async def test_loaded_cities_are_returned_without_fetching_again() -> None:
    source = _FakeSource([_raw("A", stay="1 mo", decades="1990s")])
    store = CityStore(source)

    first = await store.ensure_loaded()
    second = await store.ensure_loaded()

    assert _names(first) == ["A"]
    assert _names(second) == ["A"]
    assert source.calls == 1


@pytest.mark.asyncio
async def test_load_with_no_valid_cities_is_not_repeated() -> None:
    source = _FakeSource([_raw("BAD", lat=None)])
    store = CityStore(source)

    assert await store.ensure_loaded() == []
    assert await store.ensure_loaded() == []
    assert source.calls == 1
    assert store.load_state.value == LoadState.LOADED


@pytest.mark.asyncio
async def test_failure_sets_error_and_allows_retry() -> None:
    source = _FakeSource(RuntimeError("boom"), [_raw("OK", stay="1 mo", decades="2000s")])
    store = CityStore(source)

    with pytest.raises(CitiesLoadError) as excinfo:
        await store.ensure_loaded()

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert store.error.value == "Failed to load cities"
    assert store.loading.value is False
    assert store.load_state.value == LoadState.ERROR
    assert store.cities.value == ()

    cities = await store.ensure_loaded()

    assert _names(cities) == ["OK"]
    assert source.calls == 2
    assert store.error.value is None
    assert store.load_state.value == LoadState.LOADED


@pytest.mark.asyncio
async def test_concurrent_callers_see_the_same_failure() -> None:
    gate: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
    source = _FakeSource(gate)
    store = CityStore(source)

    tasks = [asyncio.create_task(store.ensure_loaded()) for _ in range(3)]
    await _drain()
    gate.set_result(RuntimeError("boom"))
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert source.calls == 1
    assert all(isinstance(r, CitiesLoadError) for r in results)
    assert results[0] is results[1] is results[2]


@pytest.mark.asyncio
async def test_refresh_forces_exactly_one_new_fetch() -> None:
    source = _FakeSource(
        [_raw("A", stay="1 mo", decades="1990s")],
        [_raw("B", stay="2 mos", decades="2000s")],
    )
    store = CityStore(source)
    await store.ensure_loaded()

    stay_emissions: list[tuple[str, ...]] = []
    store.stay_durations.subscribe(stay_emissions.append, replay=False)

    refreshed = await store.refresh()

    assert _names(refreshed) == ["B"]
    assert source.calls == 2
    assert store.fetch_count == 2
    assert store.stay_durations.value == ("2 mos",)
    assert store.decades.value == ("2000s",)
    # cleared once, rebuilt once
    assert stay_emissions == [(), ("2 mos",)]


@pytest.mark.asyncio
async def test_refresh_during_fetch_ignores_superseded_result() -> None:
    first: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
    source = _FakeSource(first, [_raw("New")])
    store = CityStore(source)

    stale_task = asyncio.create_task(store.ensure_loaded())
    await _drain()
    assert source.calls == 1

    refreshed = await store.refresh()
    assert _names(refreshed) == ["New"]
    assert source.calls == 2

    first.set_result([_raw("Old")])
    stale = await stale_task

    # The original caller still sees its own fetch complete...
    assert _names(stale) == ["Old"]
    # ...but the store keeps the refreshed data.
    assert _names(store.cities.value) == ["New"]
    assert store.loading.value is False
    assert store.load_state.value == LoadState.LOADED


@pytest.mark.asyncio
async def test_superseded_failure_leaves_refreshed_state_alone() -> None:
    first: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
    source = _FakeSource(first, [_raw("New")])
    store = CityStore(source)

    stale_task = asyncio.create_task(store.ensure_loaded())
    await _drain()

    refreshed = await store.refresh()
    assert _names(refreshed) == ["New"]

    first.set_result(RuntimeError("boom"))
    with pytest.raises(CitiesLoadError):
        await stale_task

    assert _names(store.cities.value) == ["New"]
    assert store.error.value is None
    assert store.loading.value is False
    assert store.load_state.value == LoadState.LOADED
    assert store.fetch_count == 2

    # The refreshed load stays memoized.
    assert _names(await store.ensure_loaded()) == ["New"]
    assert source.calls == 2


@pytest.mark.asyncio
async def test_refresh_recovers_from_error() -> None:
    source = _FakeSource(RuntimeError("boom"), [_raw("A", stay="1 mo", decades="1990s")])
    store = CityStore(source)

    with pytest.raises(CitiesLoadError):
        await store.ensure_loaded()
    assert store.load_state.value == LoadState.ERROR

    cities = await store.refresh()

    assert _names(cities) == ["A"]
    assert source.calls == 2
    assert store.error.value is None
    assert store.loading.value is False
    assert store.load_state.value == LoadState.LOADED
    assert store.stay_durations.value == ("1 mo",)


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_fetch() -> None:
    gate: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
    source = _FakeSource(gate)
    store = CityStore(source)

    waiter = asyncio.create_task(store.ensure_loaded())
    await _drain()
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    gate.set_result([_raw("A")])
    cities = await store.ensure_loaded()

    assert _names(cities) == ["A"]
    assert source.calls == 1


@pytest.mark.asyncio
async def test_filtered_view_follows_filters_and_data() -> None:
    source = _FakeSource(
        [
            _raw("A", stay="1 mo", decades="1990s,2000s"),
            _raw("B", stay="2 mos", decades="1980s;1990s"),
            _raw("C", stay="1 mo", decades="2010s"),
        ]
    )
    store = CityStore(source)

    views: list[list[str]] = []
    store.filtered_cities.subscribe(lambda cities: views.append(_names(cities)))

    store.set_stay_duration_filter("1 mo")
    store.set_decade_filter("2000s")
    assert store.filtered_cities.value == ()

    await store.ensure_loaded()
    assert _names(store.filtered_cities.value) == ["A"]

    store.set_decade_filter(None)
    assert _names(store.filtered_cities.value) == ["A", "C"]

    store.clear_filters()
    assert _names(store.filtered_cities.value) == ["A", "B", "C"]
    assert views[0] == []
    assert views[-1] == ["A", "B", "C"]


def test_filter_values_are_normalized() -> None:
    store = CityStore(_FakeSource([]))

    store.set_stay_duration_filter("  3-5 mos  ")
    assert store.stay_duration_filter.value == "3-5 mos"

    store.set_stay_duration_filter("   ")
    assert store.stay_duration_filter.value is None

    store.set_decade_filter("1990s")
    store.set_decade_filter(None)
    assert store.decade_filter.value is None


def test_basemap_mode_is_passed_through() -> None:
    store = CityStore.from_config(_FakeSource([]), MyCitiesConfig(default_basemap="opentopo"))
    modes: list[str] = []
    store.basemap_mode.subscribe(modes.append)

    store.set_basemap_mode("esriworldimagery")

    assert modes == ["opentopo", "esriworldimagery"]
    assert store.basemap_mode.value == "esriworldimagery"


@pytest.mark.asyncio
async def test_returned_lists_are_copies() -> None:
    store = CityStore(_FakeSource([_raw("A")]))

    cities = await store.ensure_loaded()
    cities.clear()

    assert _names(store.cities.value) == ["A"]


@pytest.mark.asyncio
async def test_published_values_cannot_be_mutated_by_readers() -> None:
    source = _FakeSource([_raw("A", stay="1 mo", decades="1990s")])
    store = CityStore(source)
    await store.ensure_loaded()

    with pytest.raises(AttributeError):
        store.cities.value.clear()  # type: ignore[attr-defined]
    with pytest.raises(AttributeError):
        store.stay_durations.value.append("bogus")  # type: ignore[attr-defined]
    with pytest.raises(AttributeError):
        store.filtered_cities.value.clear()  # type: ignore[attr-defined]

    assert _names(await store.ensure_loaded()) == ["A"]
    assert store.stay_durations.value == ("1 mo",)
    assert store.decades.value == ("1990s",)
    assert source.calls == 1
