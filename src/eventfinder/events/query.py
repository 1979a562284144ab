from __future__ import annotations

# This module is the event query pipeline.
# It wires together:
# - domain input (a Coordinate + a set of categories)
# - the event repository (mock catalog of prototypes)
# - the geodistance helper (haversine, miles)
# - ranking (closest first)
#
# The pipeline itself is pure; the async wrapper only adds the simulated network
# latency and normalizes failures into `EventQueryFailed`.

import asyncio
import logging
import time
from typing import Iterable

from eventfinder.catalog.repository import EventRepository, MockEventRepository
from eventfinder.config.settings import Settings, get_settings
from eventfinder.core.geo import distance_miles, format_distance
from eventfinder.domain.errors import EventQueryFailed
from eventfinder.domain.models import Category, Coordinate, Event, EventPrototype

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch events. Please check your internet connection and try again."


def normalize_filters(filters: Iterable[Category | str]) -> frozenset[Category]:
    """Coerce category names into `Category` members (raises ValueError on unknown names)."""
    return frozenset(f if isinstance(f, Category) else Category.parse(f) for f in filters)


def _to_event(prototype: EventPrototype, origin: Coordinate) -> Event:
    where = prototype.resolve(origin)
    miles = distance_miles(origin.latitude, origin.longitude, where.latitude, where.longitude)
    return Event(
        id=prototype.id,
        title=prototype.title,
        description=prototype.description,
        category=prototype.category,
        start_time=prototype.start_time,
        location=where,
        distance_miles=miles,
        distance_label=format_distance(miles),
    )


def rank_events(
    location: Coordinate,
    filters: frozenset[Category],
    prototypes: list[EventPrototype],
) -> list[Event]:
    """Filter prototypes by category, measure each against `location`, sort closest first."""
    # An empty filter set is a valid state meaning "show nothing".
    if not filters:
        return []

    candidates = [p for p in prototypes if p.category in filters]
    events = [_to_event(p, location) for p in candidates]
    # Numeric key; the label is for display only. `sort` is stable so ties keep catalog order.
    events.sort(key=lambda e: e.distance_miles)
    return events


def _matches_terms(event: Event, terms: list[str]) -> bool:
    haystack = f"{event.title} {event.description}".lower()
    return all(term in haystack for term in terms)


async def query_events(
    location: Coordinate,
    filters: Iterable[Category | str],
    *,
    settings: Settings | None = None,
    repository: EventRepository | None = None,
) -> list[Event]:
    """Return catalog events near `location` whose category is in `filters`, closest first.

    Raises:
        ValueError: If `filters` names an unknown category.
        EventQueryFailed: If building or ranking the catalog fails for any other reason.
    """
    settings = settings or get_settings()
    repository = repository or MockEventRepository(settings.events.catalog_path)
    wanted = normalize_filters(filters)

    delay = settings.events.simulated_delay_seconds
    if delay > 0:
        await asyncio.sleep(delay)

    t0 = time.monotonic()
    try:
        events = rank_events(location, wanted, repository.prototypes())
    except Exception as e:
        logger.exception("Event query failed near (%.4f, %.4f)", location.latitude, location.longitude)
        raise EventQueryFailed(FETCH_FAILED_MESSAGE) from e

    logger.info(
        "Found %d events for %s in %d ms",
        len(events),
        ",".join(sorted(c.value for c in wanted)) or "<no filters>",
        int((time.monotonic() - t0) * 1000),
    )
    return events


async def search_events(
    location: Coordinate,
    query: str,
    filters: Iterable[Category | str],
    *,
    settings: Settings | None = None,
    repository: EventRepository | None = None,
) -> list[Event]:
    """Like `query_events`, keeping only events whose title/description contain every term of `query`."""
    events = await query_events(location, filters, settings=settings, repository=repository)
    terms = query.lower().split()
    if not terms:
        return events
    return [e for e in events if _matches_terms(e, terms)]
