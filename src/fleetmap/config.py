"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FLEET_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Fleet Map Dispatcher"
    data_root: Path = Field(default=Path("data"), description="Root directory for static data files.")
    roads_dataset: Optional[Path] = Field(
        default=None,
        description="JSON array of road polylines, each a list of [lng, lat] pairs. Defaults to data_root/roads.json.",
    )
    restaurants_file: Optional[Path] = Field(
        default=None,
        description="Restaurant seed file with titles and [lat, lng] coordinates. Defaults to data_root/restaurants.json.",
    )

    # Spatial cache
    redis_url: Optional[str] = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for the road tile cache.",
    )
    roads_cache_prefix: str = Field(default="roads:", min_length=1)
    preload_flag_key: str = Field(default="roads:preloaded", min_length=1)

    # Driver placement
    position_sampler: Literal["roads", "random", "osrm"] = Field(
        default="roads",
        description="Strategy used to place drivers near restaurants.",
    )
    sampler_radius_km: float = Field(default=5.0, gt=0.0)
    sampler_radius_units: Literal["degrees", "km"] = Field(
        default="degrees",
        description=(
            "How the road sampler interprets its radius. 'degrees' compares the planar "
            "degree distance against the radius value as-is; 'km' converts it first."
        ),
    )
    sampler_deadline_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Stop reading tiles once this many seconds have elapsed.",
    )

    # Distribution
    distributor: Literal["greedy", "sorted_cost"] = Field(default="greedy")
    driver_count: int = Field(default=100, ge=0)

    # OSRM nearest-road lookups
    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service.",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(default="driving")
    osrm_max_retries: int = Field(default=3, ge=0)
    osrm_backoff_seconds: float = Field(default=1.0, ge=0.0)
    osrm_nearest_max_attempts: int = Field(default=10, ge=1)

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    log_level: str = Field(default="INFO")

    @field_validator("data_root", "roads_dataset", "restaurants_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Optional[Path]:
        if value is None:
            return None
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()

    @model_validator(mode="after")
    def _default_data_files(self) -> "Settings":
        if self.roads_dataset is None:
            self.roads_dataset = self.data_root / "roads.json"
        if self.restaurants_file is None:
            self.restaurants_file = self.data_root / "restaurants.json"
        return self


settings = Settings()
