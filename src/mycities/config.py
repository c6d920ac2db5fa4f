"""Client and store configuration for mycities."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from mycities._constants import DEFAULT_BASE_URL, DEFAULT_BASEMAP_MODE, DEFAULT_REQUEST_TIMEOUT
from mycities.exceptions import MyCitiesConfigError


@dataclasses.dataclass(frozen=True)
class MyCitiesConfig:
    """Configuration shared by the API client and the city store.

    Parameters
    ----------
    base_url : str
        Base URL of the MyCities web API, including the ``/api/`` prefix.
        A trailing slash is appended when missing.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    default_basemap : str
        Basemap mode the store publishes before any consumer picks one.
    """

    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    default_basemap: str = DEFAULT_BASEMAP_MODE

    def __post_init__(self) -> None:
        base_url = self.base_url.strip()
        if not base_url:
            raise MyCitiesConfigError("base_url must be non-empty")
        if not base_url.endswith("/"):
            base_url = f"{base_url}/"
        object.__setattr__(self, "base_url", base_url)

        if self.request_timeout <= 0:
            raise MyCitiesConfigError(f"request_timeout must be positive, got {self.request_timeout}")

        basemap = self.default_basemap.strip()
        if not basemap:
            raise MyCitiesConfigError("default_basemap must be non-empty")
        object.__setattr__(self, "default_basemap", basemap)

    @classmethod
    def from_env(cls, **overrides: Any) -> MyCitiesConfig:
        """Create configuration from environment variables.

        Reads ``MYCITIES_BASE_URL``, ``MYCITIES_REQUEST_TIMEOUT`` and
        ``MYCITIES_DEFAULT_BASEMAP``.  Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "MYCITIES_BASE_URL": "base_url",
            "MYCITIES_DEFAULT_BASEMAP": "default_basemap",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # request_timeout is numeric, handle separately
        timeout_env = env.get("MYCITIES_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise MyCitiesConfigError(f"MYCITIES_REQUEST_TIMEOUT is not a number: {timeout_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
