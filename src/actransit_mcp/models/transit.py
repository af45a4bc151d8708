"""Pydantic models for AC Transit API records.

Field names follow the API's PascalCase keys through aliases. Numeric fields
stay as decimal strings; AC Transit sends them as JSON numbers or strings
depending on the endpoint, and both decode to the same string form.
"""

from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _coerce_numeric(value: object) -> object:
    """Turn JSON numbers into their decimal string form."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


NumericString = Annotated[str, BeforeValidator(_coerce_numeric)]


def _null_to_empty(value: object) -> object:
    """Decode JSON null as an empty string, like a missing field."""
    if value is None:
        return ""
    return _coerce_numeric(value)


# null and missing both decode to ""
WireString = Annotated[str, BeforeValidator(_null_to_empty)]


def _to_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class Stop(BaseModel):
    """A stop from https://api.actransit.org/transit/stops."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    stop_id: WireString = Field(default="", alias="StopId")
    name: WireString = Field(default="", alias="Name")
    latitude: NumericString | None = Field(default=None, alias="Latitude")
    longitude: NumericString | None = Field(default=None, alias="Longitude")
    # upstream sends the literal string "null" when there is no schedule
    scheduled_time: str | None = Field(default=None, alias="ScheduledTime")

    @property
    def latitude_value(self) -> float | None:
        """Latitude as a float, None if missing or malformed."""
        return _to_float(self.latitude)

    @property
    def longitude_value(self) -> float | None:
        """Longitude as a float, None if missing or malformed."""
        return _to_float(self.longitude)


class Prediction(BaseModel):
    """A predicted departure from /transit/stops/{stop_id}/predictions.

    PredictedDeparture and PredictionDateTime are naive Pacific times in
    YYYY-MM-DDTHH:MM:SS format.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    stop_id: WireString = Field(default="", alias="StopId")
    trip_id: WireString = Field(default="", alias="TripId")
    vehicle_id: WireString = Field(default="", alias="VehicleId")
    route_name: WireString = Field(default="", alias="RouteName")
    predicted_delay_in_seconds: NumericString | None = Field(default="", alias="PredictedDelayInSeconds")
    predicted_departure: WireString = Field(default="", alias="PredictedDeparture")
    prediction_date_time: WireString = Field(default="", alias="PredictionDateTime")
