"""Custom exception hierarchy for mycities."""

from __future__ import annotations


class MyCitiesError(Exception):
    """Base exception for all mycities errors."""


class MyCitiesConfigError(MyCitiesError):
    """Invalid or missing configuration."""


class MyCitiesTransportError(MyCitiesError):
    """HTTP-level failure (network, non-200, invalid JSON, unexpected payload shape)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class CitiesLoadError(MyCitiesError):
    """Fetching the city catalog failed.

    Raised to every caller waiting on the same load.  The underlying
    collaborator exception is available as ``__cause__``.
    """
