"""Safe-zone computation.

Turns a land multi-polygon and a list of restricted places into the
list of permitted regions:

    allowed = land - union(buffer(p, r) for p in restricted places)

followed by an area filter and per-zone centroid / distance metadata.

Degenerate inputs are results, not errors: empty land gives no zones,
no restricted places gives the land itself, and land fully covered by
buffers gives no zones.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from safezone_engine.clipping.polygon_set import PolygonSet
from safezone_engine.core.constants import DEFAULT_BUFFER_SEGMENTS, DEFAULT_MIN_ZONE_AREA_SQ_M
from safezone_engine.core.exceptions import ValidationError
from safezone_engine.geometry.buffer import build_buffer_polygon
from safezone_engine.geometry.geomath import distance_m
from safezone_engine.geometry.ring_ops import (
    point_in_polygon,
    polygon_net_area_sq_m,
    ring_centroid,
)
from safezone_engine.models.geometry import PolygonRings
from safezone_engine.models.safe_zone import SafeZone

if TYPE_CHECKING:
    from collections.abc import Sequence

    from safezone_engine.models.geometry import LatLng, MultiPolygon
    from safezone_engine.models.places import RestrictedPoint

logger = logging.getLogger(__name__)

ZONE_ID_PREFIX = "zone-"


class SafeZoneComputationError(ValidationError):
    """Raised when safe-zone parameters are out of range."""

    default_stage = "compute_safe_zones"
    default_code = "SAFE_ZONE_PARAMETERS_INVALID"


def compute_safe_zones(
    land: MultiPolygon,
    restricted_points: Sequence[RestrictedPoint],
    buffer_distance_m: float,
    min_zone_area_sq_m: float = DEFAULT_MIN_ZONE_AREA_SQ_M,
    *,
    segments: int = DEFAULT_BUFFER_SEGMENTS,
    polygon_set: PolygonSet | None = None,
) -> list[SafeZone]:
    """Compute the permitted regions of *land*.

    Args:
        land: The city's land mask polygons.
        restricted_points: Places that each exclude a disk of
            *buffer_distance_m* around them.
        buffer_distance_m: Exclusion radius in metres.
        min_zone_area_sq_m: Zones with a smaller net area are dropped.
        segments: Vertices per exclusion disk.
        polygon_set: Clipping wrapper; a shapely-backed one by default.

    Returns:
        Zones ``zone-0 .. zone-n`` in clipping output order.  Ids are only
        stable within one call.

    Raises:
        SafeZoneComputationError: If a distance or area parameter is
            negative or not finite.
        GeometryOperationError: If the clipping library fails.
    """
    _validate_parameters(buffer_distance_m, min_zone_area_sq_m)

    if not any(polygon.outer for polygon in land):
        logger.debug("Safe zones skipped | reason=empty_land")
        return []

    polygon_set = polygon_set if polygon_set is not None else PolygonSet()

    if restricted_points:
        exclusion = polygon_set.union_all(
            [PolygonRings(outer=build_buffer_polygon(p.location, buffer_distance_m, segments))]
            for p in restricted_points
        )
        allowed = polygon_set.difference(land, exclusion)
    else:
        allowed = list(land)

    if not allowed:
        logger.info(
            "Safe zones computed | points=%d | buffer=%.0f m | zones=0 | reason=fully_excluded",
            len(restricted_points),
            buffer_distance_m,
        )
        return []

    zones: list[SafeZone] = []
    discarded = 0
    for polygon in allowed:
        area = polygon_net_area_sq_m(polygon)
        if area < min_zone_area_sq_m or not polygon.outer:
            discarded += 1
            continue

        centroid = ring_centroid(polygon.outer)
        anchor = centroid
        if restricted_points and not point_in_polygon(centroid, polygon):
            # The outer-ring centroid can sit in a buffer hole, right on a place
            anchor = polygon_set.interior_point(polygon) or centroid
        zones.append(
            SafeZone(
                id=f"{ZONE_ID_PREFIX}{len(zones)}",
                centroid=centroid,
                paths=[list(ring) for ring in polygon.paths],
                area_sq_m=area,
                min_distance_m=nearest_distance_m(anchor, restricted_points),
            )
        )

    logger.info(
        "Safe zones computed | points=%d | buffer=%.0f m | zones=%d | discarded=%d",
        len(restricted_points),
        buffer_distance_m,
        len(zones),
        discarded,
    )
    return zones


def nearest_distance_m(point: LatLng, restricted_points: Sequence[RestrictedPoint]) -> float:
    """Distance from *point* to the closest restricted place, ``math.inf`` if none."""
    return min((distance_m(point, p.location) for p in restricted_points), default=math.inf)


def _validate_parameters(buffer_distance_m: float, min_zone_area_sq_m: float) -> None:
    if not math.isfinite(buffer_distance_m) or buffer_distance_m < 0:
        msg = f"buffer_distance_m must be a finite value >= 0, got {buffer_distance_m}"
        raise SafeZoneComputationError(msg)
    if not math.isfinite(min_zone_area_sq_m) or min_zone_area_sq_m < 0:
        msg = f"min_zone_area_sq_m must be a finite value >= 0, got {min_zone_area_sq_m}"
        raise SafeZoneComputationError(msg)
