"""
Configuration using Pydantic Settings.

Centralizes the tunables of the map core: dataset locations, fuzzy search
threshold, tile sampling timeout and reach-area parameters. Values load from
``HAZARDMAP_*`` environment variables or a ``.env`` file.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent / "data"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class HazardMapSettings(BaseSettings):
    """Settings for the shelter and hazard map core."""

    model_config = SettingsConfigDict(
        env_prefix="HAZARDMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    # Datasets
    shelters_path: Optional[Path] = Field(
        default=None, description="Shelter point GeoJSON document"
    )
    legends_path: Path = Field(
        default=DATA_DIR / "hazard_legend.json", description="Hazard legend document"
    )
    sources_path: Path = Field(
        default=DATA_DIR / "hazard_sources.yaml", description="Hazard tile source definitions"
    )

    # Search
    search_threshold: float = Field(
        default=0.3, description="Fuzzy match threshold (0 = exact only, 1 = anything)"
    )

    # Tile sampling
    tile_timeout_seconds: float = Field(
        default=10.0, description="Upper bound on waiting for a tile image"
    )
    user_agent: str = Field(
        default="hazardmap/0.1 (+shelter-map)", description="User-Agent for tile requests"
    )

    # Reach area
    reach_min_zoom: float = Field(
        default=13, description="Minimum zoom at which reach areas are computed"
    )
    reach_segments: int = Field(
        default=64, description="Vertices per buffer circle"
    )

    @field_validator("search_threshold")
    @classmethod
    def check_threshold(cls, v: float) -> float:
        """Threshold is an upper bound on the match score."""
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"search_threshold must be between 0 and 1, got {v}")
        return v

    @field_validator("tile_timeout_seconds")
    @classmethod
    def check_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"tile_timeout_seconds must be positive, got {v}")
        return v

    @field_validator("reach_segments")
    @classmethod
    def check_segments(cls, v: int) -> int:
        if v < 8:
            raise ValueError(f"reach_segments must be at least 8, got {v}")
        return v


@lru_cache()
def get_settings() -> HazardMapSettings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.

    Returns:
        HazardMapSettings instance with loaded configuration.
    """
    return HazardMapSettings()


def get_settings_uncached() -> HazardMapSettings:
    """
    Get fresh settings instance (useful for testing).

    Returns:
        New HazardMapSettings instance with loaded configuration.
    """
    return HazardMapSettings()
