"""Ring-level geometry: closure, containment, area, centroid.

Area and centroid use a local tangent-plane projection centred on the
mean latitude/longitude of the ring's points:

    x = (lng - ref_lng) * 111,320 * max(cos(ref_lat), 1e-6)
    y = (lat - ref_lat) * 111,132

followed by the shoelace formula.  This is accurate for city-sized
rings; it is not meant for rings spanning many degrees or crossing the
antimeridian.  ``geodesic_ring_area_sq_m`` gives the ellipsoidal area
(pyproj) for diagnostics and cross-checks.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from safezone_engine.core.constants import (
    DEGENERATE_AREA_EPSILON,
    METRES_PER_DEGREE_LAT,
    METRES_PER_DEGREE_LNG_EQUATOR,
    MIN_COS_LAT,
    MIN_RING_POINTS,
)
from safezone_engine.core.exceptions import ValidationError
from safezone_engine.models.geometry import LatLng

if TYPE_CHECKING:
    from collections.abc import Sequence

    from safezone_engine.models.geometry import PolygonRings, Ring


class RingError(ValidationError):
    """Raised when a ring cannot support the requested computation."""

    default_stage = "ring_ops"
    default_code = "RING_INVALID"


# ---------------------------------------------------------------------------
# Closure
# ---------------------------------------------------------------------------


def close_ring(points: Sequence[LatLng]) -> Ring:
    """Return *points* as a closed ring.

    Appends the first point when the ring is not already closed.  Empty
    input and already-closed rings are returned as a copy, unchanged.
    """
    ring = list(points)
    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])
    return ring


def is_closed(ring: Sequence[LatLng]) -> bool:
    return bool(ring) and ring[0] == ring[-1]


# ---------------------------------------------------------------------------
# Containment
# ---------------------------------------------------------------------------


def point_in_ring(point: LatLng, ring: Sequence[LatLng]) -> bool:
    """Even-odd ray cast in (lng, lat) space.

    A horizontal edge never toggles the result.  Points exactly on an
    edge resolve consistently (half-open rule on latitude) but are not
    guaranteed to count as inside.
    """
    n = len(ring)
    if n < 3:
        return False

    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = ring[i].lng, ring[i].lat
        xj, yj = ring[j].lng, ring[j].lat
        if (yi > point.lat) != (yj > point.lat):
            x_cross = (xj - xi) * (point.lat - yi) / (yj - yi) + xi
            if point.lng < x_cross:
                inside = not inside
        j = i
    return inside


def point_in_polygon(point: LatLng, polygon: PolygonRings) -> bool:
    """True iff *point* is inside the outer ring and inside no hole."""
    if not point_in_ring(point, polygon.outer):
        return False
    return not any(point_in_ring(point, hole) for hole in polygon.holes)


# ---------------------------------------------------------------------------
# Area and centroid
# ---------------------------------------------------------------------------


def _projection(ring: Sequence[LatLng]) -> tuple[float, float, float, float]:
    """Return ``(ref_lat, ref_lng, metres_per_deg_lat, metres_per_deg_lng)``."""
    count = max(len(ring), 1)
    ref_lat = sum(p.lat for p in ring) / count
    ref_lng = sum(p.lng for p in ring) / count
    cos_lat = max(math.cos(math.radians(ref_lat)), MIN_COS_LAT)
    return ref_lat, ref_lng, METRES_PER_DEGREE_LAT, METRES_PER_DEGREE_LNG_EQUATOR * cos_lat


def _signed_area_and_moments(ring: Sequence[LatLng]) -> tuple[float, float, float]:
    """Shoelace over the projected ring.

    Returns ``(twice_signed_area, cx_moment, cy_moment)`` in projected metres.
    """
    ref_lat, ref_lng, m_lat, m_lng = _projection(ring)
    twice_area = 0.0
    cx = 0.0
    cy = 0.0
    for p1, p2 in zip(ring, ring[1:]):
        x1 = (p1.lng - ref_lng) * m_lng
        y1 = (p1.lat - ref_lat) * m_lat
        x2 = (p2.lng - ref_lng) * m_lng
        y2 = (p2.lat - ref_lat) * m_lat
        cross = x1 * y2 - x2 * y1
        twice_area += cross
        cx += (x1 + x2) * cross
        cy += (y1 + y2) * cross
    return twice_area, cx, cy


def ring_area_sq_m(ring: Sequence[LatLng]) -> float:
    """Approximate ring area in square metres (winding-order agnostic).

    Rings with fewer than four points have zero area.
    """
    if len(ring) < MIN_RING_POINTS:
        return 0.0
    twice_area, _, _ = _signed_area_and_moments(ring)
    return abs(twice_area / 2)


def ring_centroid(ring: Sequence[LatLng]) -> LatLng:
    """Area-weighted centroid of a closed ring.

    When the projected signed area is below ``1e-6`` (a collapsed or
    too-short ring) the first vertex is returned instead.

    Raises:
        RingError: If the ring has no points.
    """
    if not ring:
        msg = "Cannot compute the centroid of an empty ring"
        raise RingError(msg)
    if len(ring) < MIN_RING_POINTS:
        return ring[0]

    twice_area, cx, cy = _signed_area_and_moments(ring)
    area = twice_area / 2
    if abs(area) < DEGENERATE_AREA_EPSILON:
        return ring[0]

    ref_lat, ref_lng, m_lat, m_lng = _projection(ring)
    x = cx / (6 * area)
    y = cy / (6 * area)
    return LatLng(lat=ref_lat + y / m_lat, lng=ref_lng + x / m_lng)


def polygon_net_area_sq_m(polygon: PolygonRings) -> float:
    """Outer-ring area minus the hole areas, clamped at zero."""
    net = ring_area_sq_m(polygon.outer) - sum(ring_area_sq_m(h) for h in polygon.holes)
    return max(net, 0.0)


def geodesic_ring_area_sq_m(ring: Sequence[LatLng]) -> float:
    """Ring area on the WGS 84 ellipsoid, in square metres.

    Uses ``pyproj.Geod`` and is winding-order agnostic.
    """
    if len(ring) < MIN_RING_POINTS:
        return 0.0

    from pyproj import Geod

    geod = Geod(ellps="WGS84")
    area_m2, _perimeter = geod.polygon_area_perimeter(
        [p.lng for p in ring], [p.lat for p in ring]
    )
    return abs(area_m2)
