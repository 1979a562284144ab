"""
Geospatial helpers.

A tiny geometry layer so the event pipeline can measure "how far is this event"
without pulling in heavier GIS dependencies. Distances are in miles because the
list and map views display them that way.
"""

from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_MILES = 3959


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute the unrounded great-circle distance in miles between two points."""
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)

    h = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    # Rounding (or out-of-range latitudes) can push h outside [0, 1].
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_MILES * 2 * atan2(sqrt(h), sqrt(1 - h))


def distance_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles, rounded to one decimal place.

    Inputs are not range-checked: out-of-range degrees still produce a number.
    Validation happens at the model boundary (`Coordinate`).
    """
    return round(haversine_miles(lat1, lon1, lat2, lon2), 1)


def format_distance(miles: float) -> str:
    """Render a distance label such as `0.4 miles`."""
    return f"{miles:.1f} miles"
