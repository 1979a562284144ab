"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- location input (`Coordinate`)
- catalog entities (`EventPrototype`)
- query output (`Event`)
- the snapshot handed to views (`AppState`)

Keeping these models in one place helps:
- validation (reject bad coordinates and unknown categories early),
- typed refactors,
- consistent JSON output across CLI/API.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Event category; also the unit of filtering."""

    MUSIC = "Music"
    SPORTS = "Sports"
    ART = "Art"
    THEATER = "Theater"

    @classmethod
    def parse(cls, value: str) -> "Category":
        """Case-insensitive lookup by display name (`music` -> `Category.MUSIC`)."""
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Unknown category '{value}'. Expected one of: {', '.join(c.value for c in cls)}")


ALL_CATEGORIES: frozenset[Category] = frozenset(Category)


class Coordinate(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class LocationOffset(BaseModel):
    """Degrees to add to a query location to place a catalog event."""

    lat: float
    lon: float


class EventPrototype(BaseModel):
    """A catalog entry; becomes an `Event` once resolved against a location."""

    id: str
    title: str
    description: str
    category: Category
    start_time: datetime
    offset: LocationOffset

    def resolve(self, location: Coordinate) -> Coordinate:
        """Place this event relative to `location`.

        Offsets that cross a pole come back down the opposite meridian, and
        longitudes are wrapped into [-180, 180).
        """
        lat = location.latitude + self.offset.lat
        lon = location.longitude + self.offset.lon
        if lat > 90:
            lat, lon = 180 - lat, lon + 180
        elif lat < -90:
            lat, lon = -180 - lat, lon + 180
        return Coordinate(latitude=lat, longitude=((lon + 180) % 360) - 180)


class Event(BaseModel):
    """One event as shown on the map and in the list."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    category: Category
    start_time: datetime
    location: Coordinate
    distance_miles: float = Field(..., ge=0)
    distance_label: str


class AppState(BaseModel):
    """Immutable snapshot of everything the view layer renders."""

    model_config = ConfigDict(frozen=True)

    current_location: Coordinate | None = None
    events: list[Event] = Field(default_factory=list)
    filters: frozenset[Category] = ALL_CATEGORIES
    loading: bool = True
    error: str | None = None
    query_seq: int = 0

    @field_validator("filters", mode="before")
    @classmethod
    def _parse_filters(cls, value):
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(v if isinstance(v, Category) else Category.parse(str(v)) for v in value)
        return value
