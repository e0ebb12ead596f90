"""Geometry primitives shared by every engine stage.

- ``LatLng``: a point in WGS 84 degrees
- ``Ring``: closed sequence of points (first == last, >= 4 points)
- ``PolygonRings``: one outer ring plus zero or more hole rings
- ``MultiPolygon``: list of ``PolygonRings``

Rings are plain lists so they can be built incrementally; callers treat
them as immutable once handed to another stage.  External (GeoJSON)
coordinates are ``[lng, lat]``; internally every point is ``LatLng``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from safezone_engine.core.exceptions import ValidationError


class ModelValidationError(ValueError, ValidationError):
    """Raised when a domain model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        ValidationError.__init__(self, formatted)


@dataclass(frozen=True, slots=True)
class LatLng:
    """A WGS 84 point in degrees.

    Attributes:
        lat: Latitude in [-90, 90].
        lng: Longitude in [-180, 180]; producers normalize to (-180, 180].
    """

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.lat) or not -90.0 <= self.lat <= 90.0:
            raise ModelValidationError("LatLng", "lat", self.lat, "must be in [-90, 90]")
        if not math.isfinite(self.lng) or not -180.0 <= self.lng <= 180.0:
            raise ModelValidationError("LatLng", "lng", self.lng, "must be in [-180, 180]")

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> LatLng:
        """Build from a ``{"lat": ..., "lng": ...}`` mapping.

        Raises:
            ModelValidationError: If a key is missing or not numeric.
        """
        try:
            return cls(lat=float(data["lat"]), lng=float(data["lng"]))  # type: ignore[arg-type]
        except (KeyError, TypeError, ValueError) as exc:
            raise ModelValidationError("LatLng", "location", data, "expected numeric lat/lng") from exc


Ring = list[LatLng]


@dataclass(frozen=True, slots=True)
class PolygonRings:
    """A polygon as an outer ring and its holes.

    Holes are assumed to lie inside the outer ring; the source data is
    trusted on that point and it is not checked here.
    """

    outer: Ring
    holes: list[Ring] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.outer) == 0

    @property
    def paths(self) -> list[Ring]:
        """Return ``[outer, *holes]``."""
        return [self.outer, *self.holes]

    def to_coordinates(self) -> list[list[list[float]]]:
        """Return GeoJSON-style ``[[lng, lat], ...]`` rings."""
        return [[[p.lng, p.lat] for p in ring] for ring in self.paths]


MultiPolygon = list[PolygonRings]
