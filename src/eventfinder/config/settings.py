# src/eventfinder/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/eventfinder/config/defaults.yaml`, or from an external YAML file
named by `EVENTFINDER_CONFIG_PATH` (which replaces the packaged defaults entirely), then
overridden by environment variables (e.g., `EVENTFINDER_LOCATION_LAT`, `EVENTFINDER_LOG_LEVEL`)
which may also come from a `.env` file.

Design rule:
- Tuning knobs (simulated latency, location timeout, map region, colors) live in YAML,
  not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from eventfinder.core.env import load_dotenv_if_present
from eventfinder.domain.models import Category


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `eventfinder.config`."""
    text = resources.files("eventfinder.config").joinpath(filename).read_text(encoding="utf-8")
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
    name: str = "EventFinder"
    timezone: str = "UTC"
    http_timeout_seconds: float = 10
    log_level: str = "INFO"


class StaticLocationSettings(BaseModel):
    latitude: float = Field(40.7128, ge=-90, le=90)
    longitude: float = Field(-74.0060, ge=-180, le=180)


class IpLookupSettings(BaseModel):
    url: str = "https://ipapi.co/json/"
    latitude_field: str = "latitude"
    longitude_field: str = "longitude"


class LocationSettings(BaseModel):
    platform: Literal["static", "ip"] = "static"
    # Stands in for the OS permission prompt: "granted" lets the provider read a position.
    permission: Literal["granted", "denied", "undetermined"] = "granted"
    accuracy: Literal["lowest", "low", "balanced", "high", "highest"] = "high"
    timeout_seconds: float | None = Field(default=10, gt=0)
    static: StaticLocationSettings = Field(default_factory=StaticLocationSettings)
    ip_lookup: IpLookupSettings = Field(default_factory=IpLookupSettings)


class EventsSettings(BaseModel):
    simulated_delay_seconds: float = Field(2.0, ge=0)
    catalog_path: str | None = None
    default_filters: list[Category] = Field(default_factory=lambda: list(Category))


class ViewsSettings(BaseModel):
    region_delta: float = Field(0.05, gt=0)
    category_colors: dict[str, str] = Field(
        default_factory=lambda: {
            "Music": "#ff6b6b",
            "Sports": "#4ecdc4",
            "Art": "#45b7d1",
            "Theater": "#96ceb4",
        }
    )
    fallback_color: str = "#feca57"
    current_location_color: str = "blue"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    location: LocationSettings = Field(default_factory=LocationSettings)
    events: EventsSettings = Field(default_factory=EventsSettings)
    views: ViewsSettings = Field(default_factory=ViewsSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Only a small whitelist of knobs is read from the environment.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("EVENTFINDER_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    platform = os.getenv("EVENTFINDER_LOCATION_PLATFORM")
    if platform:
        data.setdefault("location", {})["platform"] = platform

    lat = os.getenv("EVENTFINDER_LOCATION_LAT")
    lon = os.getenv("EVENTFINDER_LOCATION_LON")
    if lat:
        data.setdefault("location", {}).setdefault("static", {})["latitude"] = lat
    if lon:
        data.setdefault("location", {}).setdefault("static", {})["longitude"] = lon

    delay = os.getenv("EVENTFINDER_EVENTS_DELAY_SECONDS")
    if delay:
        data.setdefault("events", {})["simulated_delay_seconds"] = delay

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("EVENTFINDER_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
