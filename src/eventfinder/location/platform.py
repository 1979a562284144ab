"""
Location platforms.

A platform is the host capability the location provider talks to: it answers a
foreground permission request and produces a one-shot position fix. Two concrete
platforms exist:
- `StaticLocationPlatform`: fixed coordinates (configured, or injected in tests)
- `IpLocationPlatform`: approximate position from an IP-geolocation JSON endpoint

The permission answer of both comes from `location.permission` in settings, which
plays the role of the user's answer to the OS prompt.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Literal, Protocol

import httpx

from eventfinder.config.settings import Settings
from eventfinder.core.http import get_json
from eventfinder.domain.models import Coordinate

logger = logging.getLogger(__name__)

Accuracy = Literal["lowest", "low", "balanced", "high", "highest"]


class PermissionStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class LocationPlatform(Protocol):
    """Host capability consumed by `LocationProvider`."""

    async def request_permission(self) -> PermissionStatus: ...

    async def get_position(self, accuracy: Accuracy) -> Coordinate: ...


class StaticLocationPlatform:
    """Always reports the same coordinate."""

    def __init__(self, coordinate: Coordinate, *, permission: PermissionStatus = PermissionStatus.GRANTED):
        self._coordinate = coordinate
        self._permission = permission

    async def request_permission(self) -> PermissionStatus:
        return self._permission

    async def get_position(self, accuracy: Accuracy) -> Coordinate:
        return self._coordinate


class IpLocationPlatform:
    """Looks the device up by its public IP address.

    Accuracy is city-level at best; the requested accuracy is only logged.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        permission: PermissionStatus | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._permission = permission or PermissionStatus(settings.location.permission)
        self._transport = transport

    async def request_permission(self) -> PermissionStatus:
        return self._permission

    def _extract(self, payload: Any) -> Coordinate:
        lookup = self._settings.location.ip_lookup
        if not isinstance(payload, dict):
            raise ValueError("IP lookup returned a non-object payload")
        lat = payload.get(lookup.latitude_field)
        lon = payload.get(lookup.longitude_field)
        if lat is None or lon is None:
            raise ValueError(
                f"IP lookup response is missing '{lookup.latitude_field}'/'{lookup.longitude_field}'"
            )
        return Coordinate(latitude=float(lat), longitude=float(lon))

    async def get_position(self, accuracy: Accuracy) -> Coordinate:
        url = self._settings.location.ip_lookup.url
        logger.debug("Resolving position via %s (requested accuracy=%s)", url, accuracy)
        payload = await get_json(
            url,
            timeout_seconds=self._settings.app.http_timeout_seconds,
            transport=self._transport,
        )
        return self._extract(payload)


def build_platform(settings: Settings) -> LocationPlatform:
    """Create the platform named by `location.platform`."""
    permission = PermissionStatus(settings.location.permission)
    if settings.location.platform == "ip":
        return IpLocationPlatform(settings, permission=permission)
    static = settings.location.static
    return StaticLocationPlatform(
        Coordinate(latitude=static.latitude, longitude=static.longitude),
        permission=permission,
    )
