"""Shared pytest fixtures for the safe-zone engine test suite."""

from __future__ import annotations

import pytest

from safezone_engine.activities.land_mask import LandMaskCache, StaticLandGeometrySource
from safezone_engine.clipping.polygon_set import PolygonSet
from safezone_engine.models.geometry import LatLng, PolygonRings
from safezone_engine.models.places import RestrictedPoint

# ---------------------------------------------------------------------------
# Reference geometry
# ---------------------------------------------------------------------------

# Toy one-degree square at the origin
UNIT_SQUARE = [
    LatLng(0.0, 0.0),
    LatLng(0.0, 1.0),
    LatLng(1.0, 1.0),
    LatLng(1.0, 0.0),
    LatLng(0.0, 0.0),
]

# Montevideo-sized block: ~5.5 km (lat) x ~4.6 km (lng)
CITY_SOUTH, CITY_NORTH = -34.92, -34.87
CITY_WEST, CITY_EAST = -56.20, -56.15

CITY_RING = [
    LatLng(CITY_SOUTH, CITY_WEST),
    LatLng(CITY_NORTH, CITY_WEST),
    LatLng(CITY_NORTH, CITY_EAST),
    LatLng(CITY_SOUTH, CITY_EAST),
    LatLng(CITY_SOUTH, CITY_WEST),
]

# Narrow east-west strip on the equator: ~2226 m long, ~222 m tall
STRIP_RING = [
    LatLng(0.0, 0.0),
    LatLng(0.002, 0.0),
    LatLng(0.002, 0.02),
    LatLng(0.0, 0.02),
    LatLng(0.0, 0.0),
]


def square_feature(south: float, west: float, north: float, east: float) -> dict[str, object]:
    """GeoJSON Polygon feature for an axis-aligned box, ring left open."""
    return {
        "type": "Feature",
        "properties": {},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[west, south], [west, north], [east, north], [east, south]]],
        },
    }


def city_document() -> dict[str, object]:
    return {
        "type": "FeatureCollection",
        "features": [square_feature(CITY_SOUTH, CITY_WEST, CITY_NORTH, CITY_EAST)],
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def unit_square_land() -> list[PolygonRings]:
    return [PolygonRings(outer=list(UNIT_SQUARE))]


@pytest.fixture()
def city_land() -> list[PolygonRings]:
    return [PolygonRings(outer=list(CITY_RING))]


@pytest.fixture()
def strip_land() -> list[PolygonRings]:
    return [PolygonRings(outer=list(STRIP_RING))]


@pytest.fixture()
def polygon_set() -> PolygonSet:
    return PolygonSet()


@pytest.fixture()
def land_masks() -> LandMaskCache:
    """Land mask cache holding the Montevideo-sized block as ``montevideo``."""
    return LandMaskCache(StaticLandGeometrySource({"montevideo": city_document()}))


@pytest.fixture()
def city_places() -> list[RestrictedPoint]:
    """Restricted places inside the city block, plus one outside it."""
    return [
        RestrictedPoint("school-1", LatLng(-34.91, -56.19), "school"),
        RestrictedPoint("kinder-1", LatLng(-34.88, -56.16), "kindergarten"),
        RestrictedPoint("rehab-1", LatLng(-34.90, -56.16), "rehab_center"),
        RestrictedPoint("unknown-1", LatLng(-34.88, -56.19), None),
        RestrictedPoint("school-outside", LatLng(-34.80, -56.00), "school"),
    ]


@pytest.fixture()
def city_geojson() -> dict[str, object]:
    """Raw GeoJSON land document for the Montevideo-sized block."""
    return city_document()
