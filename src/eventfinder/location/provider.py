"""
Location provider.

Turns a platform capability into a single `get_current_location()` call:
1. ask for foreground permission (denial -> `PermissionDenied`, no position read)
2. read one position fix, bounded by `location.timeout_seconds`
3. normalize any failure into `LocationUnavailable`

There is no caching, retry or background tracking: every call is a fresh fix.
"""

from __future__ import annotations

import asyncio
import logging

from eventfinder.config.settings import Settings, get_settings
from eventfinder.domain.errors import LocationUnavailable, PermissionDenied
from eventfinder.domain.models import Coordinate
from eventfinder.location.platform import LocationPlatform, PermissionStatus, build_platform

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = (
    "Location permissions not granted. Please enable location access in your device settings."
)


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class LocationProvider:
    """One-shot device location with domain errors."""

    def __init__(self, platform: LocationPlatform, *, settings: Settings | None = None):
        self._platform = platform
        self._settings = settings or get_settings()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "LocationProvider":
        settings = settings or get_settings()
        return cls(build_platform(settings), settings=settings)

    async def _read_position(self) -> Coordinate:
        accuracy = self._settings.location.accuracy
        timeout = self._settings.location.timeout_seconds
        return await asyncio.wait_for(self._platform.get_position(accuracy), timeout=timeout)

    async def get_current_location(self) -> Coordinate:
        try:
            status = await self._platform.request_permission()
        except Exception as e:
            raise LocationUnavailable(f"Failed to get location: {_describe(e)}") from e

        if status != PermissionStatus.GRANTED:
            logger.warning("Location permission not granted (status=%s)", getattr(status, "value", status))
            raise PermissionDenied(PERMISSION_DENIED_MESSAGE)

        try:
            coordinate = await self._read_position()
        except asyncio.TimeoutError as e:
            logger.warning("Position fix timed out after %ss", self._settings.location.timeout_seconds)
            raise LocationUnavailable(
                f"Failed to get location: timed out after {self._settings.location.timeout_seconds}s"
            ) from e
        except Exception as e:
            logger.warning("Position fix failed: %s", e)
            raise LocationUnavailable(f"Failed to get location: {_describe(e)}") from e

        logger.info("Current location resolved to (%.4f, %.4f)", coordinate.latitude, coordinate.longitude)
        return coordinate
