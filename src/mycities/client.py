"""Async client for the MyCities web API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from mycities._constants import GET_ALL_CITIES_ENDPOINT, GET_CITY_BY_ID_ENDPOINT
from mycities._transport import JsonTransport, Transport
from mycities.config import MyCitiesConfig
from mycities.exceptions import MyCitiesError, MyCitiesTransportError

_logger = logging.getLogger(__name__)


class MyCitiesClient:
    """Async client for the MyCities web API.

    Implements the :class:`mycities.state.store.CitySource` protocol, so it
    can be handed straight to a :class:`~mycities.state.store.CityStore`.

    Usage::

        async with MyCitiesClient(config) as client:
            cities = await client.get_all_cities()
    """

    def __init__(
        self,
        config: MyCitiesConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or MyCitiesConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    @property
    def config(self) -> MyCitiesConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MyCitiesClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = JsonTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise MyCitiesError("Client not initialized. Use 'async with MyCitiesClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Cities
    # ------------------------------------------------------------------

    async def get_all_cities(self) -> list[dict[str, Any]]:
        """Fetch every city as raw JSON objects (camelCase keys)."""
        transport = self._require_transport()
        payload = await transport.get_json(GET_ALL_CITIES_ENDPOINT)
        if not isinstance(payload, list):
            raise MyCitiesTransportError(
                f"Expected a JSON array from {GET_ALL_CITIES_ENDPOINT}, got {type(payload).__name__}",
                endpoint=GET_ALL_CITIES_ENDPOINT,
            )
        _logger.debug("Received %d city objects", len(payload))
        return payload

    async def get_city(self, city_id: int) -> dict[str, Any] | None:
        """Fetch a single city, or ``None`` when the API has no such id."""
        transport = self._require_transport()
        endpoint = GET_CITY_BY_ID_ENDPOINT.format(city_id=int(city_id))
        payload = await transport.get_json(endpoint, allow_not_found=True)
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise MyCitiesTransportError(
                f"Expected a JSON object from {endpoint}, got {type(payload).__name__}",
                endpoint=endpoint,
            )
        return payload
