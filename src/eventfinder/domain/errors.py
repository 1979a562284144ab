"""
Domain errors.

Each async boundary (location fetch, event query) normalizes its failures into one
of these, carrying a message that is safe to show to the user as-is.
"""

from __future__ import annotations


class EventFinderError(Exception):
    """Base class for user-facing failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PermissionDenied(EventFinderError):
    """The platform refused foreground location access."""


class LocationUnavailable(EventFinderError):
    """Permission was granted but no position fix could be obtained."""


class EventQueryFailed(EventFinderError):
    """Building or ranking the event list failed."""
