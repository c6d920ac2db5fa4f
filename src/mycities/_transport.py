"""HTTP transport for the MyCities web API."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from mycities._constants import USER_AGENT
from mycities.config import MyCitiesConfig
from mycities.exceptions import MyCitiesTransportError

_logger = logging.getLogger(__name__)

#: Status mapped to ``None`` when a caller allows missing resources.
NOT_FOUND = 404


class Transport(Protocol):
    """Structural transport interface used by :class:`mycities.client.MyCitiesClient`.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`JsonTransport`) concrete.
    """

    async def get_json(self, endpoint: str, *, allow_not_found: bool = False) -> Any:
        ...


class JsonTransport:
    """GETs JSON documents relative to the configured API base URL."""

    def __init__(self, config: MyCitiesConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def url_for(self, endpoint: str) -> str:
        return f"{self._config.base_url}{endpoint.lstrip('/')}"

    async def get_json(self, endpoint: str, *, allow_not_found: bool = False) -> Any:
        """GET *endpoint* and decode the JSON body.

        Returns ``None`` for HTTP 404 when *allow_not_found* is set.

        Raises
        ------
        MyCitiesTransportError
            On network errors, non-200 responses or undecodable bodies.
        """
        url = self.url_for(endpoint)
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status == NOT_FOUND and allow_not_found:
                    return None
                if resp.status != 200:
                    raise MyCitiesTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except MyCitiesTransportError:
            raise
        except TimeoutError as exc:
            raise MyCitiesTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise MyCitiesTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise MyCitiesTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
