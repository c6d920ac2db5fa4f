"""Filter option ordering, derived lists and filter composition."""

from mycities.filters.compose import filter_cities
from mycities.filters.lists import FilterLists, build_filter_lists
from mycities.filters.ordering import decade_sort_key, duration_sort_key, natural_sort_key, stay_duration_sort_key

__all__ = [
    "FilterLists",
    "build_filter_lists",
    "decade_sort_key",
    "duration_sort_key",
    "filter_cities",
    "natural_sort_key",
    "stay_duration_sort_key",
]
