"""Polygon set algebra over multi-polygons with holes.

``PolygonSet`` is the only place the engine calls a clipping library.
It owns three responsibilities the backends do not:

- Degenerate inputs: empty multi-polygons and polygons whose outer ring
  has fewer than four points never reach the backend, and never raise.
- Folding: ``union_all`` reduces pairwise, left to right, so the working
  geometry grows one buffer at a time.
- Error boundary: library exceptions are re-raised as
  ``GeometryOperationError`` carrying the operation name.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from safezone_engine.clipping.factory import SHAPELY, get_backend
from safezone_engine.core.constants import MIN_RING_POINTS
from safezone_engine.core.exceptions import GeometryOperationError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from safezone_engine.clipping.base import ClippingBackend
    from safezone_engine.models.geometry import LatLng, MultiPolygon, PolygonRings

logger = logging.getLogger(__name__)


def drop_degenerate(polygons: MultiPolygon) -> MultiPolygon:
    """Return *polygons* without members whose outer ring cannot enclose area."""
    return [p for p in polygons if len(p.outer) >= MIN_RING_POINTS]


class PolygonSet:
    """Union and difference of multi-polygons via a pluggable backend."""

    def __init__(self, backend: ClippingBackend | None = None) -> None:
        self._backend = backend if backend is not None else get_backend(SHAPELY)

    @property
    def backend(self) -> ClippingBackend:
        return self._backend

    def union(self, a: MultiPolygon, b: MultiPolygon) -> MultiPolygon:
        """Geometric union of *a* and *b*.

        Raises:
            GeometryOperationError: If the clipping library fails.
        """
        a = drop_degenerate(a)
        b = drop_degenerate(b)
        if not a:
            return list(b)
        if not b:
            return list(a)
        return self._run("union", self._backend.union, a, b)

    def union_all(self, multis: Iterable[MultiPolygon]) -> MultiPolygon:
        """Fold ``union`` over *multis* left to right.

        The covered area does not depend on the fold order; only the
        vertex order of the result may.
        """
        merged: MultiPolygon = []
        count = 0
        for multi in multis:
            merged = self.union(merged, multi)
            count += 1
        logger.debug("Union fold complete | inputs=%d | polygons=%d", count, len(merged))
        return merged

    def difference(self, a: MultiPolygon, b: MultiPolygon) -> MultiPolygon | None:
        """*a* minus *b*, or ``None`` when nothing is left.

        Raises:
            GeometryOperationError: If the clipping library fails.
        """
        a = drop_degenerate(a)
        b = drop_degenerate(b)
        if not a:
            return None
        if not b:
            return list(a)
        remaining = self._run("difference", self._backend.difference, a, b)
        return remaining or None

    def interior_point(self, polygon: PolygonRings) -> LatLng | None:
        """A point inside *polygon* and outside all of its holes.

        Returns ``None`` for a degenerate polygon.

        Raises:
            GeometryOperationError: If the clipping library fails.
        """
        if not drop_degenerate([polygon]):
            return None
        try:
            return self._backend.interior_point(polygon)
        except self._backend.library_errors as exc:
            self._log_failure("interior_point", exc)
            raise GeometryOperationError("interior_point", str(exc)) from exc

    def _log_failure(self, operation: str, exc: Exception) -> None:
        logger.error(
            "Polygon operation failed | operation=%s | backend=%s | error=%s",
            operation,
            self._backend.name,
            exc,
        )

    def _run(
        self,
        operation: str,
        func: Callable[[MultiPolygon, MultiPolygon], MultiPolygon],
        a: MultiPolygon,
        b: MultiPolygon,
    ) -> MultiPolygon:
        try:
            result = func(a, b)
        except self._backend.library_errors as exc:
            self._log_failure(operation, exc)
            raise GeometryOperationError(operation, str(exc)) from exc
        return drop_degenerate(result)
