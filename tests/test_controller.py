import asyncio

import pytest

from eventfinder.app.controller import EventFinderController
from eventfinder.domain.errors import EventQueryFailed, PermissionDenied
from eventfinder.domain.models import ALL_CATEGORIES, Category, Coordinate
from eventfinder.events.query import query_events

HERE = Coordinate(latitude=40.7128, longitude=-74.0060)


class StubProvider:
    def __init__(self, *, location=HERE, error=None):
        self.location = location
        self.error = error
        self.calls = 0

    async def get_current_location(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.location


class RecordingQuery:
    """Wraps the real query and records every call."""

    def __init__(self, *, error=None):
        self.error = error
        self.calls: list[frozenset] = []

    async def __call__(self, location, filters, **kwargs):
        self.calls.append(frozenset(filters))
        if self.error:
            raise self.error
        return await query_events(location, filters, **kwargs)


def test_initial_state_is_loading_with_default_filters(settings):
    controller = EventFinderController(StubProvider(), settings=settings)
    state = controller.state
    assert state.loading is True
    assert state.current_location is None
    assert state.events == []
    assert state.filters == ALL_CATEGORIES


def test_start_loads_location_then_events(settings):
    query = RecordingQuery()
    controller = EventFinderController(StubProvider(), settings=settings, query=query)

    asyncio.run(controller.start())
    state = controller.state

    assert state.current_location == HERE
    assert len(state.events) == 8
    assert state.loading is False
    assert state.error is None
    assert query.calls == [ALL_CATEGORIES]


def test_location_error_is_surfaced_and_no_query_runs(settings):
    query = RecordingQuery()
    provider = StubProvider(error=PermissionDenied("Location permissions not granted."))
    controller = EventFinderController(provider, settings=settings, query=query)

    asyncio.run(controller.start())
    state = controller.state

    assert state.error == "Location permissions not granted."
    assert state.loading is False
    assert state.current_location is None
    assert query.calls == []


def test_query_error_is_surfaced(settings):
    query = RecordingQuery(error=EventQueryFailed("Failed to fetch events."))
    controller = EventFinderController(StubProvider(), settings=settings, query=query)

    asyncio.run(controller.start())

    assert controller.state.error == "Failed to fetch events."
    assert controller.state.loading is False
    assert controller.state.current_location == HERE


def test_unexpected_query_error_propagates_and_stops_loading(settings):
    query = RecordingQuery(error=RuntimeError("boom"))
    controller = EventFinderController(StubProvider(), settings=settings, query=query)

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(controller.start())

    assert controller.state.loading is False
    assert controller.state.error is None
    assert controller.state.current_location == HERE


def test_toggle_filter_requeries(settings):
    query = RecordingQuery()
    controller = EventFinderController(StubProvider(), settings=settings, query=query)

    async def scenario():
        await controller.start()
        await controller.toggle_filter("Music")
        after_off = controller.state
        await controller.toggle_filter(Category.MUSIC)
        return after_off, controller.state

    after_off, after_on = asyncio.run(scenario())

    assert Category.MUSIC not in after_off.filters
    assert len(after_off.events) == 6
    assert all(e.category != Category.MUSIC for e in after_off.events)
    assert after_on.filters == ALL_CATEGORIES
    assert len(after_on.events) == 8
    assert len(query.calls) == 3


def test_clearing_filters_shows_nothing(settings):
    controller = EventFinderController(StubProvider(), settings=settings)

    async def scenario():
        await controller.start()
        await controller.set_filters([])

    asyncio.run(scenario())
    assert controller.state.filters == frozenset()
    assert controller.state.events == []
    assert controller.state.error is None


def test_set_filters_before_location_only_stores_them(settings):
    query = RecordingQuery()
    controller = EventFinderController(StubProvider(), settings=settings, query=query)

    asyncio.run(controller.set_filters(["Art"]))

    assert controller.state.filters == frozenset({Category.ART})
    assert query.calls == []


def test_unknown_filter_is_rejected(settings):
    controller = EventFinderController(StubProvider(), settings=settings)
    with pytest.raises(ValueError):
        asyncio.run(controller.set_filters(["Opera"]))
    assert controller.state.filters == ALL_CATEGORIES


def test_refresh_without_location_is_a_noop(settings):
    query = RecordingQuery()
    controller = EventFinderController(StubProvider(), settings=settings, query=query)
    asyncio.run(controller.refresh())
    assert query.calls == []


def test_successful_query_clears_previous_error(settings):
    query = RecordingQuery(error=EventQueryFailed("Failed to fetch events."))
    controller = EventFinderController(StubProvider(), settings=settings, query=query)

    async def scenario():
        await controller.start()
        query.error = None
        await controller.refresh()

    asyncio.run(scenario())
    assert controller.state.error is None
    assert len(controller.state.events) == 8


def test_retry_location_after_failure(settings):
    provider = StubProvider(error=PermissionDenied("denied"))
    controller = EventFinderController(provider, settings=settings)

    async def scenario():
        await controller.start()
        provider.error = None
        await controller.retry_location()

    asyncio.run(scenario())
    assert provider.calls == 2
    assert controller.state.error is None
    assert controller.state.current_location == HERE
    assert len(controller.state.events) == 8


def test_stale_query_result_is_discarded(settings):
    # The first (Music) query resolves after the second (Sports) one.
    delays = {frozenset({Category.MUSIC}): 0.05, frozenset({Category.SPORTS}): 0.0}

    async def slow_query(location, filters, **kwargs):
        await asyncio.sleep(delays[frozenset(filters)])
        return await query_events(location, filters, **kwargs)

    controller = EventFinderController(StubProvider(), settings=settings, query=slow_query)

    async def scenario():
        await controller.set_filters([Category.SPORTS])
        await controller.start()
        await asyncio.gather(
            controller.set_filters([Category.MUSIC]),
            controller.set_filters([Category.SPORTS]),
        )

    asyncio.run(scenario())
    state = controller.state

    assert state.filters == frozenset({Category.SPORTS})
    assert {e.category for e in state.events} == {Category.SPORTS}
    assert state.loading is False


def test_stale_query_error_is_discarded(settings):
    async def flaky_query(location, filters, **kwargs):
        if Category.MUSIC in filters:
            await asyncio.sleep(0.05)
            raise EventQueryFailed("late failure")
        return await query_events(location, filters, **kwargs)

    controller = EventFinderController(StubProvider(), settings=settings, query=flaky_query)

    async def scenario():
        await controller.set_filters([Category.ART])
        await controller.start()
        await asyncio.gather(
            controller.set_filters([Category.MUSIC]),
            controller.set_filters([Category.ART]),
        )

    asyncio.run(scenario())
    assert controller.state.error is None
    assert {e.category for e in controller.state.events} == {Category.ART}


def test_subscribers_receive_snapshots_until_unsubscribed(settings):
    controller = EventFinderController(StubProvider(), settings=settings)
    seen = []
    unsubscribe = controller.subscribe(seen.append)

    asyncio.run(controller.start())
    count = len(seen)
    assert count >= 2
    assert seen[-1] is controller.state
    assert seen[-1].loading is False

    unsubscribe()
    asyncio.run(controller.refresh())
    assert len(seen) == count
