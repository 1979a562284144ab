"""
Application state controller.

The controller is the only owner of the current location and the current event
list. Views never mutate anything: they read `controller.state` (an immutable
`AppState` snapshot), subscribe to new snapshots, and call the action methods.

Flow:
- `start()` / `retry_location()`: acquire the location, then run an event query
- `set_filters()` / `toggle_filter()`: store the new filter set, then re-query
- `refresh()`: re-query with the current location and filters

Overlapping queries (e.g. quick filter toggling) are sequenced: each query gets a
monotonically increasing number and only the most recently issued one may write
its result or error into the state.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, Protocol

from eventfinder.config.settings import Settings, get_settings
from eventfinder.domain.errors import EventFinderError
from eventfinder.domain.models import AppState, Category, Coordinate, Event
from eventfinder.events.query import normalize_filters, query_events

logger = logging.getLogger(__name__)

StateListener = Callable[[AppState], None]
QueryFn = Callable[..., Awaitable[list[Event]]]


class LocationSource(Protocol):
    async def get_current_location(self) -> Coordinate: ...


class EventFinderController:
    def __init__(
        self,
        provider: LocationSource,
        *,
        settings: Settings | None = None,
        query: QueryFn = query_events,
    ):
        self._provider = provider
        self._settings = settings or get_settings()
        self._query = query
        self._state = AppState(filters=frozenset(self._settings.events.default_filters))
        self._listeners: list[StateListener] = []
        self._latest_seq = 0

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def provider(self) -> LocationSource:
        return self._provider

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register `listener` for every new snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _update(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            listener(self._state)

    async def start(self) -> None:
        """Acquire the device location and load events for it."""
        self._update(loading=True)
        try:
            location = await self._provider.get_current_location()
        except EventFinderError as e:
            logger.warning("Location error: %s", e.message)
            self._update(loading=False, error=e.message)
            return

        self._update(current_location=location, error=None)
        await self._load_events()

    async def retry_location(self) -> None:
        await self.start()

    async def set_filters(self, filters: Iterable[Category | str]) -> None:
        """Replace the active filter set and re-query (raises ValueError on unknown categories)."""
        self._update(filters=normalize_filters(filters))
        await self._load_events()

    async def toggle_filter(self, category: Category | str) -> None:
        """Select `category` if it is off, deselect it if it is on."""
        cat = category if isinstance(category, Category) else Category.parse(category)
        await self.set_filters(self._state.filters ^ {cat})

    async def refresh(self) -> None:
        await self._load_events()

    async def _load_events(self) -> None:
        location = self._state.current_location
        if location is None:
            return

        self._latest_seq += 1
        seq = self._latest_seq
        filters = self._state.filters
        self._update(loading=True, query_seq=seq)

        try:
            events = await self._query(location, filters, settings=self._settings)
        except EventFinderError as e:
            if seq != self._latest_seq:
                logger.debug("Dropping error from stale query #%d (latest is #%d)", seq, self._latest_seq)
                return
            logger.warning("Events error: %s", e.message)
            self._update(loading=False, error=e.message)
            return
        except Exception:
            if seq == self._latest_seq:
                self._update(loading=False)
            raise

        if seq != self._latest_seq:
            logger.debug("Dropping result of stale query #%d (latest is #%d)", seq, self._latest_seq)
            return
        self._update(events=events, loading=False, error=None)
