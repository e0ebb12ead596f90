"""Data models for computed safe zones and their cache variants.

A ``SafeZone`` is one connected piece of permitted land; a
``CacheVariant`` groups the zones computed for one subset of restricted
categories.  Both serialise to plain dicts for the cache writer.

``min_distance_m`` is ``math.inf`` when no restricted place constrained
the zone.  JSON has no infinity, so ``to_dict()`` writes ``None`` and
``from_dict()`` reads it back as ``math.inf``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from safezone_engine.models.geometry import LatLng, ModelValidationError, Ring


def _ring_to_dicts(ring: Ring) -> list[dict[str, float]]:
    return [p.to_dict() for p in ring]


def _ring_from_dicts(raw: object) -> Ring:
    if not isinstance(raw, list):
        raise ModelValidationError("SafeZone", "paths", raw, "each path must be a list")
    return [LatLng.from_dict(p) for p in raw]


@dataclass(frozen=True, slots=True)
class SafeZone:
    """A region of permitted land.

    Attributes:
        id: ``"zone-<index>"``, stable only within one computation.
        centroid: Centroid of the outer ring.
        paths: ``[outer, *holes]`` closed rings.
        area_sq_m: Outer area minus hole areas, in square metres.
        min_distance_m: Distance to the nearest restricted place, measured
            from the centroid or, when the centroid falls in a hole, from a
            point inside the zone.  ``math.inf`` when unconstrained.
    """

    id: str
    centroid: LatLng
    paths: list[Ring] = field(default_factory=list)
    area_sq_m: float = 0.0
    min_distance_m: float = math.inf

    @property
    def outer(self) -> Ring:
        return self.paths[0] if self.paths else []

    @property
    def holes(self) -> list[Ring]:
        return self.paths[1:]

    @property
    def is_constrained(self) -> bool:
        """Whether any restricted place contributed to ``min_distance_m``."""
        return math.isfinite(self.min_distance_m)

    def to_dict(self) -> dict[str, object]:
        """Serialise for the cache writer."""
        return {
            "id": self.id,
            "centroid": self.centroid.to_dict(),
            "paths": [_ring_to_dicts(ring) for ring in self.paths],
            "area_sq_m": self.area_sq_m,
            "min_distance_m": self.min_distance_m if self.is_constrained else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> SafeZone:
        """Deserialise a cached zone.

        Raises:
            ModelValidationError: If the centroid or paths are malformed.
        """
        centroid_raw = data.get("centroid")
        if not isinstance(centroid_raw, dict):
            raise ModelValidationError("SafeZone", "centroid", centroid_raw, "must be a mapping")
        paths_raw = data.get("paths", [])
        if not isinstance(paths_raw, list):
            raise ModelValidationError("SafeZone", "paths", paths_raw, "must be a list")
        distance_raw = data.get("min_distance_m")
        return cls(
            id=str(data.get("id", "")),
            centroid=LatLng.from_dict(centroid_raw),
            paths=[_ring_from_dicts(ring) for ring in paths_raw],
            area_sq_m=float(data.get("area_sq_m", 0.0)),  # type: ignore[arg-type]
            min_distance_m=math.inf if distance_raw is None else float(distance_raw),  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class CacheVariantMeta:
    """Parameters a variant was computed with."""

    buffer_distance_m: float
    restricted_place_count: int

    def to_dict(self) -> dict[str, object]:
        return {
            "buffer_distance_m": self.buffer_distance_m,
            "restricted_place_count": self.restricted_place_count,
        }


@dataclass(frozen=True, slots=True)
class CacheVariant:
    """Safe zones pre-computed for one subset of restricted categories.

    Attributes:
        key: Canonical subset key (``"none"`` for the empty subset).
        categories: Sorted, unique categories in the subset.
        zones: Safe zones for this subset.
        meta: Buffer distance and number of restricted places applied.
    """

    key: str
    categories: list[str]
    zones: list[SafeZone]
    meta: CacheVariantMeta

    def to_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "categories": list(self.categories),
            "zones": [zone.to_dict() for zone in self.zones],
            "meta": self.meta.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> CacheVariant:
        """Deserialise a cached variant.

        Raises:
            ModelValidationError: If ``zones`` or ``meta`` have unexpected types.
        """
        zones_raw = data.get("zones", [])
        if not isinstance(zones_raw, list):
            raise ModelValidationError("CacheVariant", "zones", zones_raw, "must be a list")
        meta_raw = data.get("meta", {})
        if not isinstance(meta_raw, dict):
            raise ModelValidationError("CacheVariant", "meta", meta_raw, "must be a mapping")
        categories_raw = data.get("categories", [])
        if not isinstance(categories_raw, list):
            raise ModelValidationError(
                "CacheVariant", "categories", categories_raw, "must be a list"
            )
        return cls(
            key=str(data.get("key", "")),
            categories=[str(c) for c in categories_raw],
            zones=[SafeZone.from_dict(z) for z in zones_raw],
            meta=CacheVariantMeta(
                buffer_distance_m=float(meta_raw.get("buffer_distance_m", 0.0)),
                restricted_place_count=int(meta_raw.get("restricted_place_count", 0)),
            ),
        )
