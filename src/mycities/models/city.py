"""City record model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from mycities.ingestion.normalize import finite_or_none, normalize_token, safe_int


class CityRecord(BaseModel):
    """A city the author has lived in.

    Fields are mapped from the ``MyCities/GetAllCities`` response
    (camelCase keys).  Text fields never hold ``None``; coordinates are
    ``None`` when the upstream value is missing, unparseable or not finite.

    Parameters
    ----------
    id : int or None
        Row identifier assigned by the data service.
    city : str
        City name.
    country : str
        Country name.
    region : str
        Region or state.
    lat : float or None
        Latitude in degrees.
    lon : float or None
        Longitude in degrees.
    stay_duration : str
        Human-authored stay label such as ``"3-5 mos"`` or ``"> 20 yrs"``.
    decades : str
        One or more decades, e.g. ``"1990s, 2000s"``.
    notes : str or None
        Free-form notes.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: int | None = Field(default=None, validation_alias=AliasChoices("id", "Id"))
    city: str = Field(default="", validation_alias=AliasChoices("city", "City"))
    country: str = Field(default="", validation_alias=AliasChoices("country", "Country"))
    region: str = Field(default="", validation_alias=AliasChoices("region", "Region"))
    lat: float | None = Field(default=None, validation_alias=AliasChoices("lat", "Lat", "latitude"))
    lon: float | None = Field(
        default=None,
        validation_alias=AliasChoices("lon", "Lon", "lng", "longitude"),
    )
    stay_duration: str = Field(
        default="",
        validation_alias=AliasChoices("stayDuration", "StayDuration", "stay_duration"),
    )
    decades: str = Field(default="", validation_alias=AliasChoices("decades", "Decades"))
    notes: str | None = Field(default=None, validation_alias=AliasChoices("notes", "Notes"))

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("city", "country", "region", "stay_duration", "decades", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return normalize_token(value)

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float | None:
        return finite_or_none(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> str | None:
        return normalize_token(value) or None
