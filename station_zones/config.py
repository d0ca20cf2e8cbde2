# station_zones/config.py
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"

# Rio de Janeiro bike share (GBFS station_information)
DEFAULT_GBFS_URL = (
    "https://riodejaneiro.publicbikesystem.net/customer/ube/gbfs/v1/en/station_information"
)


class Settings(BaseSettings):
    """Application settings pulled from environment variables (STATION_ZONES_*)."""

    model_config = SettingsConfigDict(
        env_prefix="STATION_ZONES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Geometry
    epsilon: float = Field(default=1e-9, description="Point equality tolerance")
    bounds_margin: float = Field(default=0.1, description="Working box padding, fraction of extent")
    min_bounds_padding: float = Field(default=1e-3, description="Working box padding floor")
    apply_constraints: bool = Field(default=True, description="Filter and clip against constraints")

    # Datasets
    stations_csv: Path = Field(default=DATA_DIR / "rio_metro.csv")
    constraints_json: Path = Field(default=DATA_DIR / "rio_constraints.json")
    output_json: Path = Field(default=DATA_DIR / "station_partition.json")
    gbfs_url: str = Field(default=DEFAULT_GBFS_URL)
    http_timeout_s: float = Field(default=10.0)

    # API
    allowed_origins: str = Field(default="*", description="CORS allowed origins, comma separated")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description="console | json")

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
