from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ACTransitConfig(BaseSettings):
    """Configuration for AC Transit API access.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    token: str = Field(default="", alias="ACTRANSIT_TOKEN")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    request_timeout_seconds: float = Field(default=30.0, alias="ACTRANSIT_TIMEOUT")
    port: int = Field(default=5000, alias="PORT")

    stops_url: str = "https://api.actransit.org/transit/stops"
    predictions_url_template: str = "https://api.actransit.org/transit/stops/{stop_id}/predictions"

    # stops worth checking without being asked for one
    useful_stops: list[str] = ["58123", "52246"]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_config() -> ACTransitConfig:
    """Get AC Transit configuration (cached singleton).

    The .env file is only read outside production.

    Returns:
        ACTransitConfig with values from .env file or environment variables.
    """
    config = ACTransitConfig(_env_file=None)
    if config.is_production:
        return config
    return ACTransitConfig()
