"""ClippingBackend abstract base class.

Defines the contract every polygon clipping adapter must implement.
``PolygonSet`` talks exclusively to this interface, so the library
doing the actual clipping can be swapped without touching the engine.

All operations work on the engine's ring-list representation
(``list[PolygonRings]``, points as ``LatLng``).  Inputs reaching a
backend are never empty and contain no degenerate polygons;
``PolygonSet`` filters those out first.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, ClassVar

from safezone_engine.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from safezone_engine.models.geometry import LatLng, MultiPolygon, PolygonRings


class ClippingBackend(abc.ABC):
    """Abstract base class for polygon clipping adapters.

    Example usage::

        backend = get_backend("shapely")
        merged = backend.union(buffers_a, buffers_b)
        allowed = backend.difference(land, merged)
    """

    #: Registry name of the backend.
    name: ClassVar[str] = ""

    #: Library-specific exception types the backend may raise.  ``PolygonSet``
    #: translates these into ``GeometryOperationError``.
    library_errors: ClassVar[tuple[type[Exception], ...]] = ()

    @abc.abstractmethod
    def union(self, a: MultiPolygon, b: MultiPolygon) -> MultiPolygon:
        """Return the geometric union of *a* and *b*.

        Returns:
            Disjoint polygons covering both inputs; empty list if the
            union is empty.
        """

    @abc.abstractmethod
    def difference(self, a: MultiPolygon, b: MultiPolygon) -> MultiPolygon:
        """Return *a* minus *b*.

        Returns:
            The remaining polygons; empty list if nothing is left.
        """

    @abc.abstractmethod
    def interior_point(self, polygon: PolygonRings) -> LatLng | None:
        """Return a point strictly inside *polygon* (outside its holes).

        Returns:
            The point, or ``None`` if the polygon encloses no area.
        """


class ClippingBackendError(ConfigurationError):
    """Raised when the configured clipping backend is not registered.

    Attributes:
        backend: The requested backend name.
    """

    default_stage = "clipping"
    default_code = "CLIPPING_BACKEND_UNKNOWN"

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.backend}] {self.message}"
