import asyncio

import httpx
import pytest

from eventfinder.domain.errors import LocationUnavailable, PermissionDenied
from eventfinder.domain.models import Coordinate
from eventfinder.location.platform import (
    IpLocationPlatform,
    PermissionStatus,
    StaticLocationPlatform,
    build_platform,
)
from eventfinder.location.provider import PERMISSION_DENIED_MESSAGE, LocationProvider


class RecordingPlatform:
    def __init__(self, *, permission=PermissionStatus.GRANTED, position=None, error=None, delay=0.0):
        self.permission = permission
        self.position = position or Coordinate(latitude=51.5074, longitude=-0.1278)
        self.error = error
        self.delay = delay
        self.position_calls: list[str] = []

    async def request_permission(self):
        return self.permission

    async def get_position(self, accuracy):
        self.position_calls.append(accuracy)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.position


def _with_location(settings, **updates):
    location = settings.location.model_copy(update=updates)
    return settings.model_copy(update={"location": location})


def test_denied_permission_never_reads_position(settings):
    platform = RecordingPlatform(permission=PermissionStatus.DENIED)
    provider = LocationProvider(platform, settings=settings)

    with pytest.raises(PermissionDenied) as excinfo:
        asyncio.run(provider.get_current_location())

    assert excinfo.value.message == PERMISSION_DENIED_MESSAGE
    assert platform.position_calls == []


def test_undetermined_permission_counts_as_denied(settings):
    platform = RecordingPlatform(permission=PermissionStatus.UNDETERMINED)
    with pytest.raises(PermissionDenied):
        asyncio.run(LocationProvider(platform, settings=settings).get_current_location())
    assert platform.position_calls == []


def test_granted_permission_returns_one_high_accuracy_fix(settings):
    platform = RecordingPlatform()
    here = asyncio.run(LocationProvider(platform, settings=settings).get_current_location())

    assert here == Coordinate(latitude=51.5074, longitude=-0.1278)
    assert platform.position_calls == ["high"]


def test_platform_failure_is_wrapped(settings):
    platform = RecordingPlatform(error=RuntimeError("GPS offline"))
    with pytest.raises(LocationUnavailable) as excinfo:
        asyncio.run(LocationProvider(platform, settings=settings).get_current_location())

    assert excinfo.value.message == "Failed to get location: GPS offline"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_platform_failure_without_message_uses_type_name(settings):
    platform = RecordingPlatform(error=OSError())
    with pytest.raises(LocationUnavailable, match="Failed to get location: OSError"):
        asyncio.run(LocationProvider(platform, settings=settings).get_current_location())


def test_slow_fix_times_out(settings):
    platform = RecordingPlatform(delay=1.0)
    provider = LocationProvider(platform, settings=_with_location(settings, timeout_seconds=0.01))

    with pytest.raises(LocationUnavailable, match="timed out"):
        asyncio.run(provider.get_current_location())


def test_static_platform_reports_configured_coordinate():
    here = Coordinate(latitude=48.8566, longitude=2.3522)
    platform = StaticLocationPlatform(here)
    assert asyncio.run(platform.request_permission()) == PermissionStatus.GRANTED
    assert asyncio.run(platform.get_position("high")) == here


def test_ip_platform_reads_coordinates_from_lookup(settings):
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"latitude": 37.7749, "longitude": -122.4194, "city": "San Francisco"})

    platform = IpLocationPlatform(settings, transport=httpx.MockTransport(handler))
    provider = LocationProvider(platform, settings=settings)

    here = asyncio.run(provider.get_current_location())
    assert here == Coordinate(latitude=37.7749, longitude=-122.4194)
    assert seen == [settings.location.ip_lookup.url]


def test_ip_platform_http_error_is_location_unavailable(settings):
    platform = IpLocationPlatform(settings, transport=httpx.MockTransport(lambda r: httpx.Response(503)))
    with pytest.raises(LocationUnavailable) as excinfo:
        asyncio.run(LocationProvider(platform, settings=settings).get_current_location())
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


def test_ip_platform_missing_fields_is_location_unavailable(settings):
    transport = httpx.MockTransport(lambda r: httpx.Response(200, json={"city": "Nowhere"}))
    platform = IpLocationPlatform(settings, transport=transport)
    with pytest.raises(LocationUnavailable, match="missing 'latitude'/'longitude'"):
        asyncio.run(LocationProvider(platform, settings=settings).get_current_location())


def test_ip_platform_respects_denied_permission(settings):
    def handler(request):
        raise AssertionError("lookup must not run without permission")

    platform = IpLocationPlatform(
        settings, permission=PermissionStatus.DENIED, transport=httpx.MockTransport(handler)
    )
    with pytest.raises(PermissionDenied):
        asyncio.run(LocationProvider(platform, settings=settings).get_current_location())


def test_build_platform_follows_settings(settings):
    assert isinstance(build_platform(settings), StaticLocationPlatform)
    assert isinstance(build_platform(_with_location(settings, platform="ip")), IpLocationPlatform)

    denied = _with_location(settings, permission="denied")
    provider = LocationProvider.from_settings(denied)
    with pytest.raises(PermissionDenied):
        asyncio.run(provider.get_current_location())


def test_from_settings_uses_static_coordinates(settings):
    here = asyncio.run(LocationProvider.from_settings(settings).get_current_location())
    assert here == Coordinate(
        latitude=settings.location.static.latitude,
        longitude=settings.location.static.longitude,
    )
