"""mycities - Async reactive city store for the MyCities travel-log map viewer."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mycities")
except PackageNotFoundError:
    __version__ = "0+local"
from mycities.client import MyCitiesClient
from mycities.config import MyCitiesConfig
from mycities.exceptions import (
    CitiesLoadError,
    MyCitiesConfigError,
    MyCitiesError,
    MyCitiesTransportError,
)
from mycities.filters import FilterLists, build_filter_lists, filter_cities
from mycities.models import CityRecord
from mycities.state.channels import ReadOnlyChannel, ValueChannel
from mycities.state.events import LoadState
from mycities.state.store import CitySource, CityStore

__all__ = [
    "__version__",
    "CitiesLoadError",
    "CityRecord",
    "CitySource",
    "CityStore",
    "FilterLists",
    "LoadState",
    "MyCitiesClient",
    "MyCitiesConfig",
    "MyCitiesConfigError",
    "MyCitiesError",
    "MyCitiesTransportError",
    "ReadOnlyChannel",
    "ValueChannel",
    "build_filter_lists",
    "filter_cities",
]
