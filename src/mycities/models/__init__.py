"""Data models for MyCities API responses."""

from mycities.models.city import CityRecord

__all__ = [
    "CityRecord",
]
