"""
API routes.

Endpoints (stateful, backed by the app's single controller):
- GET  `/api/state`: the current `AppState` snapshot
- GET  `/api/views/map`, `/api/views/list`, `/api/views/filters`: view models
- PUT  `/api/filters`, POST `/api/filters/{category}/toggle`: filter actions
- POST `/api/location/retry`, POST `/api/events/refresh`: manual retries

Endpoints (stateless):
- GET `/api/location`: one location fix
- GET `/api/events`: event query for explicit coordinates
- GET `/api/distance`: geodistance between two points
- GET `/api/categories`: categories and their colors
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from eventfinder.app.controller import EventFinderController
from eventfinder.config.settings import Settings, get_settings
from eventfinder.core.geo import distance_miles, format_distance
from eventfinder.domain.errors import (
    EventFinderError,
    EventQueryFailed,
    LocationUnavailable,
    PermissionDenied,
)
from eventfinder.domain.models import AppState, Category, Coordinate
from eventfinder.events.query import search_events
from eventfinder.location.provider import LocationProvider
from eventfinder.views.render import category_color, event_list, filter_chips, map_view

router = APIRouter()

_ERROR_STATUS: dict[type[EventFinderError], tuple[int, str]] = {
    PermissionDenied: (403, "PERMISSION_DENIED"),
    LocationUnavailable: (503, "LOCATION_UNAVAILABLE"),
    EventQueryFailed: (502, "EVENT_QUERY_FAILED"),
}


class FilterUpdate(BaseModel):
    categories: list[str]


def build_controller(settings: Settings | None = None) -> EventFinderController:
    """Create the controller served by the app (patched in tests)."""
    settings = settings or get_settings()
    return EventFinderController(LocationProvider.from_settings(settings), settings=settings)


def _controller(request: Request) -> EventFinderController:
    return request.app.state.controller


def _state_payload(state: AppState) -> dict:
    data = state.model_dump(mode="json")
    data["filters"] = sorted(c.value for c in state.filters)
    return data


def _http_error(e: EventFinderError) -> HTTPException:
    status, code = _ERROR_STATUS.get(type(e), (500, "INTERNAL_ERROR"))
    return HTTPException(status_code=status, detail={"code": code, "message": e.message})


def _validation_error(e: ValueError) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)})


@router.get("/api/state")
def get_state(request: Request) -> dict:
    return _state_payload(_controller(request).state)


@router.get("/api/views/map")
def get_map_view(request: Request) -> dict:
    """Map region + markers, or `{"map": null}` before a location is known."""
    controller = _controller(request)
    view = map_view(controller.state, controller.settings)
    return {"map": view.model_dump(mode="json") if view else None}


@router.get("/api/views/list")
def get_list_view(request: Request) -> dict:
    controller = _controller(request)
    return event_list(controller.state, controller.settings).model_dump(mode="json")


@router.get("/api/views/filters")
def get_filter_chips(request: Request) -> dict:
    controller = _controller(request)
    chips = filter_chips(controller.state, settings=controller.settings)
    return {"chips": [c.model_dump(mode="json") for c in chips]}


@router.put("/api/filters")
async def put_filters(request: Request, payload: FilterUpdate) -> dict:
    controller = _controller(request)
    try:
        await controller.set_filters(payload.categories)
    except ValueError as e:
        raise _validation_error(e) from e
    return _state_payload(controller.state)


@router.post("/api/filters/{category}/toggle")
async def toggle_filter(request: Request, category: str) -> dict:
    controller = _controller(request)
    try:
        await controller.toggle_filter(category)
    except ValueError as e:
        raise _validation_error(e) from e
    return _state_payload(controller.state)


@router.post("/api/location/retry")
async def retry_location(request: Request) -> dict:
    controller = _controller(request)
    await controller.retry_location()
    return _state_payload(controller.state)


@router.post("/api/events/refresh")
async def refresh_events(request: Request) -> dict:
    controller = _controller(request)
    await controller.refresh()
    return _state_payload(controller.state)


@router.get("/api/location")
async def get_location(request: Request) -> dict:
    """Take one fresh location fix without touching the controller state."""
    try:
        here = await _controller(request).provider.get_current_location()
    except EventFinderError as e:
        raise _http_error(e) from e
    return here.model_dump(mode="json")


@router.get("/api/events")
async def get_events(
    request: Request,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    category: list[str] | None = Query(default=None),
    q: str = "",
) -> dict:
    """Run the event query for explicit coordinates (all categories when none are given)."""
    settings = _controller(request).settings
    here = Coordinate(latitude=lat, longitude=lon)
    categories = category if category else [c.value for c in Category]
    try:
        events = await search_events(here, q, categories, settings=settings)
    except EventFinderError as e:
        raise _http_error(e) from e
    except ValueError as e:
        raise _validation_error(e) from e
    return {"count": len(events), "events": [e.model_dump(mode="json") for e in events]}


@router.get("/api/distance")
def get_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> dict:
    miles = distance_miles(lat1, lon1, lat2, lon2)
    return {"miles": miles, "label": format_distance(miles)}


@router.get("/api/categories")
def get_categories(request: Request) -> dict:
    settings = _controller(request).settings
    return {"categories": [{"name": c.value, "color": category_color(c, settings)} for c in Category]}
