"""
View models for the map, the filter chips and the event list.

Every function here is a pure function of an `AppState` snapshot (plus settings for
colors/timezone). Front ends (CLI, HTTP API, a mobile shell) render these models
and never touch the controller's state directly.
"""

from __future__ import annotations

from pydantic import BaseModel

from eventfinder.config.settings import Settings, get_settings
from eventfinder.core.time import format_event_date
from eventfinder.domain.models import ALL_CATEGORIES, AppState, Category

LOADING_TEXT = "Loading events..."
EMPTY_HINT_TEXT = "Try adjusting your filters or check back later for new events in your area."


class MapRegion(BaseModel):
    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float


class MapMarker(BaseModel):
    id: str
    latitude: float
    longitude: float
    title: str
    description: str
    color: str
    label: str


class MapView(BaseModel):
    region: MapRegion
    markers: list[MapMarker]


class FilterChip(BaseModel):
    category: Category
    selected: bool
    color: str


class EventListItem(BaseModel):
    id: str
    title: str
    category: Category
    badge_color: str
    description: str
    date: str
    distance: str


class EventListView(BaseModel):
    header: str
    items: list[EventListItem]
    loading: bool
    empty_text: str | None = None


def category_color(category: Category | str, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    name = category.value if isinstance(category, Category) else str(category)
    return settings.views.category_colors.get(name, settings.views.fallback_color)


def map_view(state: AppState, settings: Settings | None = None) -> MapView | None:
    """Region + markers; None until a location is known ("Loading map...")."""
    settings = settings or get_settings()
    here = state.current_location
    if here is None:
        return None

    delta = settings.views.region_delta
    markers = [
        MapMarker(
            id="current-location",
            latitude=here.latitude,
            longitude=here.longitude,
            title="Your Location",
            description="You are here",
            color=settings.views.current_location_color,
            label="",
        )
    ]
    for event in state.events:
        markers.append(
            MapMarker(
                id=event.id,
                latitude=event.location.latitude,
                longitude=event.location.longitude,
                title=event.title,
                description=f"{event.category.value} • {event.distance_label}",
                color=category_color(event.category, settings),
                label=event.category.value[0],
            )
        )
    return MapView(
        region=MapRegion(
            latitude=here.latitude,
            longitude=here.longitude,
            latitude_delta=delta,
            longitude_delta=delta,
        ),
        markers=markers,
    )


def filter_chips(
    state: AppState,
    available: frozenset[Category] | list[Category] = ALL_CATEGORIES,
    settings: Settings | None = None,
) -> list[FilterChip]:
    settings = settings or get_settings()
    ordered = [c for c in Category if c in set(available)]
    return [
        FilterChip(category=c, selected=c in state.filters, color=category_color(c, settings))
        for c in ordered
    ]


def event_list(state: AppState, settings: Settings | None = None) -> EventListView:
    settings = settings or get_settings()
    tz = settings.app.timezone
    items = [
        EventListItem(
            id=e.id,
            title=e.title,
            category=e.category,
            badge_color=category_color(e.category, settings),
            description=e.description,
            date=format_event_date(e.start_time, tz),
            distance=e.distance_label,
        )
        for e in state.events
    ]

    empty_text = None
    if not items:
        empty_text = LOADING_TEXT if state.loading else EMPTY_HINT_TEXT

    return EventListView(
        header=f"{len(items)} Events Found" if items else "Events",
        items=items,
        loading=state.loading,
        empty_text=empty_text,
    )


def one_line_summary(item: EventListItem) -> str:
    """Compact CLI rendering of one list row."""
    return f"{item.title} [{item.category.value}]  {item.date}  {item.distance}"
