"""Polygon clipping adapters.

Implements the pluggable clipping capability (Strategy pattern):
- ClippingBackend: Abstract base class defining ``union`` / ``difference``
- ShapelyClippingBackend: GEOS via shapely (default)
- PolygonSet: engine-facing wrapper with degenerate-input handling and
  a single ``GeometryOperationError`` boundary
"""

from safezone_engine.clipping.base import ClippingBackend, ClippingBackendError
from safezone_engine.clipping.factory import (
    SHAPELY,
    get_backend,
    list_backends,
    register_backend,
)
from safezone_engine.clipping.polygon_set import PolygonSet, drop_degenerate

__all__ = [
    "SHAPELY",
    "ClippingBackend",
    "ClippingBackendError",
    "PolygonSet",
    "drop_degenerate",
    "get_backend",
    "list_backends",
    "register_backend",
]
