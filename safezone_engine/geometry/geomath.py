"""Spherical earth math on WGS 84 degrees.

All distances use a spherical earth of radius ``EARTH_RADIUS_M``.  That is
accurate to well under 0.5 % at city scale, which is all the engine
guarantees.
"""

from __future__ import annotations

import math

from safezone_engine.core.constants import EARTH_RADIUS_M
from safezone_engine.models.geometry import LatLng


def degrees_to_radians(value: float) -> float:
    return value * math.pi / 180.0


def radians_to_degrees(value: float) -> float:
    return value * 180.0 / math.pi


def normalize_longitude(value: float) -> float:
    """Wrap a longitude into (-180, 180].

    Equivalent to repeated +/-360 adjustment.  Idempotent.  Non-finite
    values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    if -180.0 < value <= 180.0:
        return value
    wrapped = math.fmod(value + 180.0, 360.0)
    if wrapped <= 0.0:
        wrapped += 360.0
    return wrapped - 180.0


def distance_m(a: LatLng, b: LatLng) -> float:
    """Great-circle (haversine) distance between two points, in metres."""
    d_lat = degrees_to_radians(b.lat - a.lat)
    d_lng = degrees_to_radians(b.lng - a.lng)
    lat1 = degrees_to_radians(a.lat)
    lat2 = degrees_to_radians(b.lat)

    hav = math.sin(d_lat / 2) ** 2 + math.sin(d_lng / 2) ** 2 * math.cos(lat1) * math.cos(lat2)
    # Rounding can push hav a hair outside [0, 1] for antipodal points
    hav = min(max(hav, 0.0), 1.0)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(hav), math.sqrt(1 - hav))


def destination(origin: LatLng, bearing_rad: float, angular_distance_rad: float) -> LatLng:
    """Point reached from *origin* along a great circle.

    Args:
        origin: Start point.
        bearing_rad: Initial bearing, clockwise from north, in radians.
        angular_distance_rad: Distance travelled divided by the earth radius.

    Returns:
        Destination point with longitude normalized to (-180, 180].
    """
    lat1 = degrees_to_radians(origin.lat)
    lng1 = degrees_to_radians(origin.lng)

    sin_lat2 = math.sin(lat1) * math.cos(angular_distance_rad) + math.cos(lat1) * math.sin(
        angular_distance_rad
    ) * math.cos(bearing_rad)
    lat2 = math.asin(min(max(sin_lat2, -1.0), 1.0))
    lng2 = lng1 + math.atan2(
        math.sin(bearing_rad) * math.sin(angular_distance_rad) * math.cos(lat1),
        math.cos(angular_distance_rad) - math.sin(lat1) * math.sin(lat2),
    )

    return LatLng(
        lat=min(max(radians_to_degrees(lat2), -90.0), 90.0),
        lng=normalize_longitude(radians_to_degrees(lng2)),
    )
