# src/gruenfinder/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/gruenfinder/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `OPENWEATHERMAP_API_KEY`, `GRUENFINDER_LOG_LEVEL`)
- an external YAML file via `GRUENFINDER_CONFIG_PATH`

Design rule:
- Tuning knobs (speeds, size thresholds, endpoints) live in YAML, not hard-coded in the engine.
"""

from __future__ import annotations

import math
import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from gruenfinder.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `gruenfinder.config`."""
    text = resources.files("gruenfinder.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "GruenFinder"
    http_timeout_seconds: float = 10
    log_level: str = "INFO"


class MapSettings(BaseModel):
    # [lng, lat] like GeoJSON.
    center: tuple[float, float] = (13.404954, 52.520008)
    # Nominatim viewbox: west, north, east, south.
    viewbox: tuple[float, float, float, float] | None = (13.0883, 52.6755, 13.7611, 52.3383)


class DataSettings(BaseModel):
    path: str | None = "data/green_spaces.json"
    url: str | None = None


class GeocodingSettings(BaseModel):
    base_url: str = "https://nominatim.openstreetmap.org/search"
    country_codes: str = "de"
    limit: int = Field(default=1, ge=1, le=10)
    bounded: bool = False
    # Nominatim usage policy: identify the application and keep to ~1 request per second.
    user_agent: str = "gruenfinder/0.1.0"
    min_interval_seconds: float = Field(default=1.0, ge=0)
    max_cached_queries: int = Field(default=1024, ge=1)


class DefaultWeather(BaseModel):
    temperature_c: int = 22
    condition: str = "Sunny"
    icon: str = "fa-sun"


class WeatherSettings(BaseModel):
    base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    api_key: str | None = None
    default: DefaultWeather = Field(default_factory=DefaultWeather)
    condition_icons: dict[str, str] = Field(
        default_factory=lambda: {
            "Clear": "fa-sun",
            "Rain": "fa-cloud-rain",
            "Snow": "fa-snowflake",
            "Thunderstorm": "fa-bolt",
        }
    )
    fallback_icon: str = "fa-cloud"


class TravelSettings(BaseModel):
    # Meters per minute.
    speeds_m_per_min: dict[str, float] = Field(
        default_factory=lambda: {
            "walking": 80,
            "cycling": 250,
            "public_transport": 400,
            "driving": 600,
        }
    )
    default_mode: str = "walking"

    @model_validator(mode="after")
    def _default_mode_has_speed(self) -> "TravelSettings":
        if self.default_mode not in self.speeds_m_per_min:
            raise ValueError(f"travel.default_mode '{self.default_mode}' has no configured speed")
        if any(v <= 0 for v in self.speeds_m_per_min.values()):
            raise ValueError("travel.speeds_m_per_min values must be > 0")
        return self


class SizeRange(BaseModel):
    min: float = Field(..., ge=0)
    max: float = math.inf
    name: str = ""

    @field_validator("max", mode="before")
    @classmethod
    def _parse_infinity(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and v.strip().lower() in {"inf", "infinity", ".inf"}):
            return math.inf
        return v


class CategoryDisplay(BaseModel):
    name: str
    color: str


class RoutingSettings(BaseModel):
    directions_url: str = "https://www.google.com/maps/dir/"
    travel_mode: Literal["walking", "bicycling", "transit", "driving"] = "walking"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    weather: WeatherSettings = Field(default_factory=WeatherSettings)
    travel: TravelSettings = Field(default_factory=TravelSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
    size_categories: dict[Literal["small", "medium", "large"], SizeRange] = Field(
        default_factory=lambda: {
            "small": SizeRange(min=0, max=1, name="Small"),
            "medium": SizeRange(min=1, max=10, name="Medium"),
            "large": SizeRange(min=10, name="Large"),
        }
    )
    categories: dict[str, CategoryDisplay] = Field(default_factory=dict)
    facility_icons: dict[str, str] = Field(default_factory=dict)
    accessibility_icons: dict[str, str] = Field(default_factory=dict)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small to avoid exposing unsafe overrides.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("GRUENFINDER_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    data_path = os.getenv("GRUENFINDER_DATA_PATH")
    if data_path:
        data.setdefault("data", {})["path"] = data_path

    data_url = os.getenv("GRUENFINDER_DATA_URL")
    if data_url:
        data.setdefault("data", {})["url"] = data_url

    user_agent = os.getenv("GRUENFINDER_GEOCODING_USER_AGENT")
    if user_agent:
        data.setdefault("geocoding", {})["user_agent"] = user_agent

    owm_key = os.getenv("OPENWEATHERMAP_API_KEY")
    if owm_key:
        data.setdefault("weather", {})["api_key"] = owm_key

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("GRUENFINDER_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
