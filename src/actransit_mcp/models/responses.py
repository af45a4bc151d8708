from pydantic import BaseModel, Field


class StopResult(BaseModel):
    stop_id: str
    name: str
    latitude: float | None = None
    longitude: float | None = None
    scheduled_time: str | None = Field(
        default=None, description="Scheduled time as sent by AC Transit ('null' when unscheduled)"
    )


class GetAllStopsResponse(BaseModel):
    stops: list[StopResult]
    count: int = Field(description="Number of stops returned")


class PredictionResult(BaseModel):
    """A single predicted departure with derived timing fields."""

    # Identification
    stop_id: str
    trip_id: str
    vehicle_id: str
    route_name: str = Field(description="Line name, e.g. '80'")

    # Raw timestamps (Pacific time, YYYY-MM-DDTHH:MM:SS)
    predicted_departure: str
    prediction_date_time: str

    # Delay
    delay_seconds: int = Field(description="Delay in seconds (positive=late, negative=early)")
    is_delayed: bool
    friendly_delay_seconds: int = Field(description="Delay truncated to whole seconds")

    # Time until departure (None when the departure time could not be parsed)
    seconds_until_departure: int | None = None
    minutes_until_departure: int | None = None


class GetPredictionsResponse(BaseModel):
    """Predictions for one stop, sorted by time until departure."""

    stop_id: str
    predictions: list[PredictionResult]
    count: int = Field(description="Number of predictions returned")
    deduplicated: bool = Field(
        default=False, description="Whether same-route, same-departure predictions were collapsed"
    )
    query_time: str = Field(description="Time the predictions were evaluated, YYYY-MM-DDTHH:MM:SS Pacific")
    message: str | None = None


class GetUsefulStopPredictionsResponse(BaseModel):
    stops: list[GetPredictionsResponse]
    count: int = Field(description="Number of stops queried")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
