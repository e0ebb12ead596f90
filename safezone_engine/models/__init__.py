"""Data models and schemas.

Defines the data structures used throughout the engine:
- LatLng, PolygonRings, Ring, MultiPolygon: geometry primitives
- RestrictedPoint: a place that triggers an exclusion buffer
- SafeZone, CacheVariant: computed results
- SafeZoneCatalog: document handed to the cache writer
"""

from safezone_engine.models.catalog import SafeZoneCatalog
from safezone_engine.models.geometry import (
    LatLng,
    ModelValidationError,
    MultiPolygon,
    PolygonRings,
    Ring,
)
from safezone_engine.models.places import RestrictedPoint
from safezone_engine.models.safe_zone import CacheVariant, CacheVariantMeta, SafeZone

__all__ = [
    "CacheVariant",
    "CacheVariantMeta",
    "LatLng",
    "ModelValidationError",
    "MultiPolygon",
    "PolygonRings",
    "RestrictedPoint",
    "Ring",
    "SafeZone",
    "SafeZoneCatalog",
]
