"""Unit tests for PolygonSet union / difference.

Uses the default shapely backend for the geometric properties and a
stub backend for the error boundary.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from shapely.errors import ShapelyError

from safezone_engine.clipping.base import ClippingBackend
from safezone_engine.clipping.polygon_set import PolygonSet, drop_degenerate
from safezone_engine.clipping.shapely_backend import ShapelyClippingBackend
from safezone_engine.core.exceptions import GeometryOperationError, PermanentError
from safezone_engine.geometry.buffer import build_buffer_polygon
from safezone_engine.geometry.ring_ops import (
    point_in_polygon,
    polygon_net_area_sq_m,
    ring_area_sq_m,
)
from safezone_engine.models.geometry import LatLng, PolygonRings


def _buffer(lat: float, lng: float, radius_m: float = 300.0) -> list[PolygonRings]:
    return [PolygonRings(outer=build_buffer_polygon(LatLng(lat, lng), radius_m))]


def _area(polygons: list[PolygonRings] | None) -> float:
    return sum(polygon_net_area_sq_m(p) for p in polygons or [])


class _FailingBackend(ClippingBackend):
    name = "failing"
    library_errors = (RuntimeError,)

    def union(self, a, b):  # type: ignore[no-untyped-def]
        msg = "TopologyException: side location conflict"
        raise RuntimeError(msg)

    def difference(self, a, b):  # type: ignore[no-untyped-def]
        msg = "TopologyException: self-intersection"
        raise RuntimeError(msg)

    def interior_point(self, polygon):  # type: ignore[no-untyped-def]
        msg = "IllegalArgumentException: invalid ring"
        raise RuntimeError(msg)


class TestUnion:
    """Union of buffer polygons."""

    def test_disjoint_area_is_sum(self, polygon_set: PolygonSet) -> None:
        a = _buffer(-34.90, -56.18)
        b = _buffer(-34.90, -56.15)
        merged = polygon_set.union(a, b)
        assert len(merged) == 2
        assert _area(merged) == pytest.approx(_area(a) + _area(b), rel=1e-6)

    def test_overlapping_area_is_less_than_sum(self, polygon_set: PolygonSet) -> None:
        a = _buffer(-34.900, -56.180)
        b = _buffer(-34.901, -56.180)
        merged = polygon_set.union(a, b)
        assert len(merged) == 1
        assert _area(merged) < _area(a) + _area(b)
        assert _area(merged) > max(_area(a), _area(b))

    def test_empty_operands(self, polygon_set: PolygonSet) -> None:
        a = _buffer(-34.90, -56.18)
        assert polygon_set.union([], a) == a
        assert polygon_set.union(a, []) == a
        assert polygon_set.union([], []) == []

    def test_degenerate_polygons_ignored(self, polygon_set: PolygonSet) -> None:
        a = _buffer(-34.90, -56.18)
        assert polygon_set.union(a, [PolygonRings(outer=[])]) == a

    def test_fold_order_does_not_change_area(self, polygon_set: PolygonSet) -> None:
        buffers = [
            _buffer(-34.900, -56.180),
            _buffer(-34.902, -56.181),
            _buffer(-34.910, -56.150),
            _buffer(-34.899, -56.183),
        ]
        forward = polygon_set.union_all(buffers)
        backward = polygon_set.union_all(list(reversed(buffers)))
        assert _area(forward) == pytest.approx(_area(backward), rel=1e-6)
        assert len(forward) == len(backward) == 2

    def test_union_all_empty(self, polygon_set: PolygonSet) -> None:
        assert polygon_set.union_all([]) == []


class TestDifference:
    """Land minus exclusion buffers."""

    def test_buffer_inside_land_leaves_hole(
        self, polygon_set: PolygonSet, city_land: list[PolygonRings]
    ) -> None:
        exclusion = _buffer(-34.895, -56.175)
        allowed = polygon_set.difference(city_land, exclusion)
        assert allowed is not None
        assert len(allowed) == 1
        assert len(allowed[0].holes) == 1
        assert not point_in_polygon(LatLng(-34.895, -56.175), allowed[0])
        assert point_in_polygon(LatLng(-34.91, -56.19), allowed[0])
        expected = ring_area_sq_m(city_land[0].outer) - _area(exclusion)
        assert _area(allowed) == pytest.approx(expected, rel=1e-3)

    def test_fully_covered_returns_none(self, polygon_set: PolygonSet) -> None:
        small_land = [
            PolygonRings(
                outer=[
                    LatLng(0.0, 0.0),
                    LatLng(0.001, 0.0),
                    LatLng(0.001, 0.001),
                    LatLng(0.0, 0.001),
                    LatLng(0.0, 0.0),
                ]
            )
        ]
        assert polygon_set.difference(small_land, _buffer(0.0005, 0.0005, 1000)) is None

    def test_empty_land_returns_none(self, polygon_set: PolygonSet) -> None:
        assert polygon_set.difference([], _buffer(0.0, 0.0)) is None

    def test_empty_exclusion_returns_land(
        self, polygon_set: PolygonSet, city_land: list[PolygonRings]
    ) -> None:
        assert polygon_set.difference(city_land, []) == city_land

    def test_split_into_two(self, polygon_set: PolygonSet, strip_land: list[PolygonRings]) -> None:
        allowed = polygon_set.difference(strip_land, _buffer(0.001, 0.01, 300))
        assert allowed is not None
        assert len(allowed) == 2


class TestInteriorPoint:
    """A point inside the zone, never inside one of its holes."""

    def test_avoids_hole_over_centroid(
        self, polygon_set: PolygonSet, city_land: list[PolygonRings]
    ) -> None:
        allowed = polygon_set.difference(city_land, _buffer(-34.895, -56.175))
        assert allowed is not None
        point = polygon_set.interior_point(allowed[0])
        assert point is not None
        assert point_in_polygon(point, allowed[0])

    def test_plain_polygon(self, polygon_set: PolygonSet, city_land: list[PolygonRings]) -> None:
        point = polygon_set.interior_point(city_land[0])
        assert point is not None
        assert point_in_polygon(point, city_land[0])

    def test_degenerate_polygon_is_none(self, polygon_set: PolygonSet) -> None:
        short = PolygonRings(outer=[LatLng(0, 0), LatLng(0, 1), LatLng(0, 0)])
        assert polygon_set.interior_point(short) is None


class TestErrorBoundary:
    """Library failures surface as GeometryOperationError."""

    def test_union_failure_wrapped(self) -> None:
        polygon_set = PolygonSet(_FailingBackend())
        with pytest.raises(GeometryOperationError) as exc_info:
            polygon_set.union(_buffer(0, 0), _buffer(0, 0.001))
        assert exc_info.value.operation == "union"
        assert "side location conflict" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_difference_failure_wrapped(self) -> None:
        polygon_set = PolygonSet(_FailingBackend())
        with pytest.raises(GeometryOperationError) as exc_info:
            polygon_set.difference(_buffer(0, 0), _buffer(0, 0.001))
        assert exc_info.value.operation == "difference"
        assert exc_info.value.category == "permanent"
        assert isinstance(exc_info.value, PermanentError)

    def test_interior_point_failure_wrapped(self) -> None:
        polygon_set = PolygonSet(_FailingBackend())
        with pytest.raises(GeometryOperationError, match="interior_point failed") as exc_info:
            polygon_set.interior_point(_buffer(0, 0)[0])
        assert exc_info.value.operation == "interior_point"

    def test_degenerate_inputs_skip_backend(self) -> None:
        """Empty operands never reach a (failing) backend."""
        polygon_set = PolygonSet(_FailingBackend())
        assert polygon_set.union([], []) == []
        assert polygon_set.difference([], _buffer(0, 0)) is None

    def test_shapely_error_wrapped(self) -> None:
        with patch.object(
            ShapelyClippingBackend, "difference", side_effect=ShapelyError("GEOS error")
        ):
            with pytest.raises(GeometryOperationError, match="difference failed"):
                PolygonSet().difference(_buffer(0, 0), _buffer(0, 0.001))

    def test_shapely_value_error_wrapped(self) -> None:
        with patch.object(
            ShapelyClippingBackend,
            "union",
            side_effect=ValueError("A linearring requires at least 4 coordinates."),
        ):
            with pytest.raises(GeometryOperationError, match="union failed"):
                PolygonSet().union(_buffer(0, 0), _buffer(0, 0.001))


class TestDropDegenerate:
    def test_filters_short_outer_rings(self) -> None:
        good = _buffer(0, 0)[0]
        short = PolygonRings(outer=[LatLng(0, 0), LatLng(0, 1), LatLng(0, 0)])
        assert drop_degenerate([good, short, PolygonRings(outer=[])]) == [good]
