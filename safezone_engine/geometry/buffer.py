"""Exclusion buffers: a geodesic disk approximated as a closed ring."""

from __future__ import annotations

import math

from safezone_engine.core.constants import DEFAULT_BUFFER_SEGMENTS, EARTH_RADIUS_M
from safezone_engine.core.exceptions import ValidationError
from safezone_engine.geometry.geomath import destination
from safezone_engine.models.geometry import LatLng, Ring


class BufferParameterError(ValidationError):
    """Raised for an impossible buffer radius or segment count."""

    default_stage = "buffer"
    default_code = "BUFFER_INVALID"


def build_buffer_polygon(
    center: LatLng,
    radius_m: float,
    segments: int = DEFAULT_BUFFER_SEGMENTS,
) -> Ring:
    """Approximate the disk of *radius_m* around *center*.

    Samples ``segments`` equally spaced bearings, starting due north and
    going clockwise, and closes the ring.  The result has exactly
    ``segments + 1`` points, or none when ``segments == 0``.

    Vertices lie on the circle, so edges cut slightly inside it: the
    inscribed distance is ``radius_m * cos(pi / segments)``.

    Raises:
        BufferParameterError: If *segments* is negative or *radius_m* is negative
            or not finite.
    """
    if segments < 0:
        msg = f"Buffer segments must be >= 0, got {segments}"
        raise BufferParameterError(msg)
    if not math.isfinite(radius_m) or radius_m < 0:
        msg = f"Buffer radius must be a finite value >= 0 metres, got {radius_m}"
        raise BufferParameterError(msg)
    if segments == 0:
        return []

    angular_distance = radius_m / EARTH_RADIUS_M
    step = 2 * math.pi / segments
    points = [destination(center, i * step, angular_distance) for i in range(segments)]
    # Always append the closing vertex, even when every sample coincides (radius 0)
    return [*points, points[0]]
