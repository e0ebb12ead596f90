"""Shapely (GEOS) clipping adapter.

Polygons are handed to GEOS with ``x = lng`` and ``y = lat``.  Planar
clipping in degree space is exact enough at city scale because every
input vertex already lies on the curved boundary it approximates.

A multi-polygon on the engine side may hold overlapping members (e.g.
land features that touch, or raw buffers); GEOS requires a valid
MultiPolygon, so overlapping members are dissolved with ``union_all``
before an operation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import shapely
from shapely.errors import ShapelyError
from shapely.geometry import GeometryCollection
from shapely.geometry import MultiPolygon as ShapelyMultiPolygon
from shapely.geometry import Polygon as ShapelyPolygon

from safezone_engine.clipping.base import ClippingBackend
from safezone_engine.models.geometry import LatLng, PolygonRings

if TYPE_CHECKING:
    from shapely.geometry.base import BaseGeometry

    from safezone_engine.models.geometry import MultiPolygon, Ring

logger = logging.getLogger(__name__)


class ShapelyClippingBackend(ClippingBackend):
    """Clipping backend built on ``shapely``."""

    name = "shapely"
    library_errors = (ShapelyError, ValueError)

    def union(self, a: MultiPolygon, b: MultiPolygon) -> MultiPolygon:
        merged = _to_shapely(a).union(_to_shapely(b))
        return _from_shapely(merged)

    def difference(self, a: MultiPolygon, b: MultiPolygon) -> MultiPolygon:
        remaining = _to_shapely(a).difference(_to_shapely(b))
        return _from_shapely(remaining)

    def interior_point(self, polygon: PolygonRings) -> LatLng | None:
        geometry = _to_shapely([polygon])
        if geometry.is_empty:
            return None
        # Unlike the centroid, the representative point never falls in a hole
        point = geometry.representative_point()
        return LatLng(lat=point.y, lng=point.x)


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------


def _ring_to_xy(ring: Ring) -> list[tuple[float, float]]:
    return [(p.lng, p.lat) for p in ring]


def _ring_from_xy(coords: object) -> Ring:
    return [LatLng(lat=float(y), lng=float(x)) for x, y, *_ in coords]  # type: ignore[attr-defined]


def _to_shapely(polygons: MultiPolygon) -> BaseGeometry:
    shapes = [
        ShapelyPolygon(_ring_to_xy(p.outer), holes=[_ring_to_xy(h) for h in p.holes])
        for p in polygons
    ]
    if len(shapes) == 1:
        return shapes[0]
    geometry = ShapelyMultiPolygon(shapes)
    if not geometry.is_valid:
        geometry = shapely.union_all(shapes)
    return geometry


def _from_shapely(geometry: BaseGeometry) -> MultiPolygon:
    if geometry.is_empty:
        return []
    if isinstance(geometry, ShapelyPolygon):
        return [
            PolygonRings(
                outer=_ring_from_xy(geometry.exterior.coords),
                holes=[_ring_from_xy(interior.coords) for interior in geometry.interiors],
            )
        ]
    if isinstance(geometry, ShapelyMultiPolygon | GeometryCollection):
        result: MultiPolygon = []
        for part in geometry.geoms:
            result.extend(_from_shapely(part))
        return result
    # Lines and points left over from touching boundaries carry no area
    logger.debug("Dropping non-areal clipping output | type=%s", geometry.geom_type)
    return []
