"""City land masks: parsing, memoization, point containment.

A land mask is the multi-polygon of a city's usable land, read from a
GeoJSON-like document (``features[].geometry`` of type ``Polygon`` or
``MultiPolygon``, rings of ``[lng, lat]``).  Every ring is closed on
load.

``LandMaskCache`` is the injectable replacement for a module-level memo:
the composition root owns one instance, and each city is parsed at most
once per cache even under concurrent first access.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from safezone_engine.core.constants import SQ_METRES_PER_HECTARE
from safezone_engine.core.exceptions import ConfigurationError, ValidationError
from safezone_engine.geometry.geomath import normalize_longitude
from safezone_engine.geometry.ring_ops import (
    close_ring,
    geodesic_ring_area_sq_m,
    point_in_polygon,
)
from safezone_engine.models.geometry import LatLng, PolygonRings

if TYPE_CHECKING:
    from collections.abc import Mapping

    from safezone_engine.models.geometry import MultiPolygon, Ring

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LandGeometryNotFoundError(ConfigurationError):
    """Raised when no land geometry is registered for a city."""

    default_stage = "land_mask"
    default_code = "LAND_GEOMETRY_NOT_FOUND"

    def __init__(self, city_id: str) -> None:
        self.city_id = city_id
        super().__init__(f"Land geometry not configured for city {city_id!r}")


class LandGeometryError(ValidationError):
    """Raised when a land geometry document is malformed."""

    default_stage = "land_mask"
    default_code = "LAND_GEOMETRY_INVALID"


# ---------------------------------------------------------------------------
# Geometry sources
# ---------------------------------------------------------------------------


class LandGeometrySource(Protocol):
    """Supplies the raw GeoJSON-like land document for a city."""

    def get(self, city_id: str) -> Mapping[str, object] | None:
        """Return the document for *city_id*, or ``None`` if unknown."""
        ...


class StaticLandGeometrySource:
    """In-memory mapping of city id to land document."""

    def __init__(self, documents: Mapping[str, Mapping[str, object]]) -> None:
        self._documents = dict(documents)

    def get(self, city_id: str) -> Mapping[str, object] | None:
        return self._documents.get(city_id)


class DirectoryLandGeometrySource:
    """Reads ``<directory>/<city_id>.geojson`` on request."""

    suffix = ".geojson"

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def get(self, city_id: str) -> Mapping[str, object] | None:
        # Reject ids that would escape the directory
        if not city_id or Path(city_id).name != city_id:
            return None
        path = self._directory / f"{city_id}{self.suffix}"
        if not path.is_file():
            return None
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            msg = f"Land geometry file {path.name} is not valid JSON: {exc}"
            raise LandGeometryError(msg) from exc
        if not isinstance(document, dict):
            msg = f"Land geometry file {path.name} must contain a JSON object"
            raise LandGeometryError(msg)
        return document


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _coords_to_ring(raw_ring: object, context: str) -> Ring:
    """Convert ``[[lng, lat, (alt)], ...]`` into a closed ring of ``LatLng``.

    Raises:
        LandGeometryError: If any coordinate is malformed or out of range.
    """
    if not isinstance(raw_ring, list | tuple):
        msg = f"{context}: ring must be a list, got {type(raw_ring).__name__}"
        raise LandGeometryError(msg)
    points: Ring = []
    for idx, c in enumerate(raw_ring):
        if not isinstance(c, list | tuple) or len(c) < 2:
            msg = f"{context}: malformed coordinate at index {idx}: {c!r}"
            raise LandGeometryError(msg)
        try:
            points.append(LatLng(lat=float(c[1]), lng=normalize_longitude(float(c[0]))))
        except (TypeError, ValueError) as exc:
            # ModelValidationError is a ValueError
            msg = f"{context}: invalid coordinate at index {idx}: {c!r}"
            raise LandGeometryError(msg) from exc
    return close_ring(points)


def _rings_to_polygon(raw_polygon: object, context: str) -> PolygonRings:
    if not isinstance(raw_polygon, list | tuple) or not raw_polygon:
        return PolygonRings(outer=[])
    rings = [_coords_to_ring(r, f"{context} ring {i}") for i, r in enumerate(raw_polygon)]
    return PolygonRings(outer=rings[0], holes=rings[1:])


def parse_land_geometry(city_id: str, document: Mapping[str, object]) -> MultiPolygon:
    """Parse a GeoJSON-like land document into normalized polygons.

    Features without geometry, and geometry types other than ``Polygon``
    and ``MultiPolygon``, are skipped.

    Raises:
        LandGeometryError: If the document or a coordinate is malformed.
    """
    features = document.get("features", [])
    if not isinstance(features, list):
        msg = f"Land geometry for {city_id!r}: features must be a list"
        raise LandGeometryError(msg)

    polygons: MultiPolygon = []
    for index, feature in enumerate(features):
        geometry = feature.get("geometry") if isinstance(feature, dict) else None
        if not isinstance(geometry, dict):
            continue
        geometry_type = geometry.get("type")
        coordinates = geometry.get("coordinates", [])
        context = f"{city_id} feature {index}"
        if geometry_type == "Polygon":
            polygons.append(_rings_to_polygon(coordinates, context))
        elif geometry_type == "MultiPolygon":
            if not isinstance(coordinates, list):
                msg = f"{context}: MultiPolygon coordinates must be a list"
                raise LandGeometryError(msg)
            polygons.extend(
                _rings_to_polygon(p, f"{context} polygon {i}") for i, p in enumerate(coordinates)
            )
        else:
            logger.warning(
                "Skipping land feature | city=%s | index=%d | type=%s",
                city_id,
                index,
                geometry_type,
            )
    return polygons


# ---------------------------------------------------------------------------
# Land mask
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LandMask:
    """A city's usable land.  Immutable once loaded."""

    city_id: str
    polygons: MultiPolygon = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(p.outer for p in self.polygons)

    def contains_point(self, point: LatLng) -> bool:
        """True if *point* is inside any polygon's outer ring and none of its holes."""
        return any(point_in_polygon(point, polygon) for polygon in self.polygons)

    def geodesic_area_ha(self) -> float:
        """Ellipsoidal land area in hectares (holes subtracted)."""
        total = 0.0
        for polygon in self.polygons:
            total += geodesic_ring_area_sq_m(polygon.outer)
            total -= sum(geodesic_ring_area_sq_m(h) for h in polygon.holes)
        return max(total, 0.0) / SQ_METRES_PER_HECTARE


class LandMaskCache:
    """Process-wide land mask memo, owned by the composition root.

    Each city is loaded at most once: concurrent first calls for the same
    city wait on a per-city lock while the first caller parses.
    """

    def __init__(self, source: LandGeometrySource) -> None:
        self._source = source
        self._masks: dict[str, LandMask] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def load(self, city_id: str) -> LandMask:
        """Return the land mask for *city_id*, parsing it on first use.

        Raises:
            LandGeometryNotFoundError: If the source has no geometry for the city.
            LandGeometryError: If the geometry document is malformed.
        """
        mask = self._masks.get(city_id)
        if mask is not None:
            return mask

        with self._registry_lock:
            lock = self._locks.setdefault(city_id, threading.Lock())

        with lock:
            mask = self._masks.get(city_id)
            if mask is not None:
                return mask

            document = self._source.get(city_id)
            if document is None:
                raise LandGeometryNotFoundError(city_id)

            mask = LandMask(city_id=city_id, polygons=parse_land_geometry(city_id, document))
            self._masks[city_id] = mask

        logger.info(
            "Land mask loaded | city=%s | polygons=%d | holes=%d | area=%.1f ha",
            city_id,
            len(mask.polygons),
            sum(len(p.holes) for p in mask.polygons),
            mask.geodesic_area_ha(),
        )
        return mask

    def contains_point(self, city_id: str, point: LatLng) -> bool:
        """True if *point* lies on the city's land.

        Raises:
            LandGeometryNotFoundError: If the city has no geometry.
        """
        return self.load(city_id).contains_point(point)

    def clear(self) -> None:
        """Forget every loaded mask.

        Per-city locks are kept, so a load racing with ``clear`` still
        parses the city once.  Waits for in-flight loads to finish.
        """
        with self._registry_lock:
            for city_id, lock in self._locks.items():
                with lock:
                    self._masks.pop(city_id, None)

    def __contains__(self, city_id: object) -> bool:
        return city_id in self._masks

    def __len__(self) -> int:
        return len(self._masks)
