"""Internal constants shared across the library."""

DEFAULT_BASE_URL = "http://localhost:5000/api/"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_BASEMAP_MODE = "standard"
USER_AGENT = "mycities/0.1"

GET_ALL_CITIES_ENDPOINT = "MyCities/GetAllCities"
GET_CITY_BY_ID_ENDPOINT = "MyCities/GetCityById/{city_id}"

#: User-facing message published on the store's error channel.
LOAD_ERROR_MESSAGE = "Failed to load cities"
