"""Sync orchestration for the safe-zone catalog.

Called by the periodic sync job after it has fetched restricted places
from the places source:

1. ``build_engine(config)``: composition root, land geometry source,
   ``LandMaskCache`` and ``PolygonSet`` from ``EngineConfig``.
2. ``sync_city_catalog(city, places, ...)`` builds every category
   variant for one city and wraps them in a ``SafeZoneCatalog``.
3. The caller hands ``catalog.to_dict()`` to its cache writer.  The
   engine persists nothing itself.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from safezone_engine.activities.build_catalog import build_catalog
from safezone_engine.activities.land_mask import (
    DirectoryLandGeometrySource,
    LandMaskCache,
    StaticLandGeometrySource,
)
from safezone_engine.clipping.factory import get_backend
from safezone_engine.clipping.polygon_set import PolygonSet
from safezone_engine.models.catalog import SafeZoneCatalog
from safezone_engine.models.places import RestrictedPoint

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from safezone_engine.activities.land_mask import LandGeometrySource
    from safezone_engine.core.config import CityDefinition, EngineConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Engine:
    """Long-lived collaborators shared by every sync run of a process."""

    config: EngineConfig
    land_masks: LandMaskCache
    polygon_set: PolygonSet


def build_engine(
    config: EngineConfig,
    *,
    source: LandGeometrySource | None = None,
) -> Engine:
    """Compose the engine from configuration.

    Args:
        config: Validated engine configuration.
        source: Land geometry source.  Defaults to the directory named by
            ``config.land_geometry_dir``, or an empty in-memory source.

    Raises:
        ClippingBackendError: If ``config.clipping_backend`` is unknown.
    """
    if source is None:
        if config.land_geometry_dir:
            source = DirectoryLandGeometrySource(config.land_geometry_dir)
        else:
            source = StaticLandGeometrySource({})

    engine = Engine(
        config=config,
        land_masks=LandMaskCache(source),
        polygon_set=PolygonSet(get_backend(config.clipping_backend)),
    )
    logger.info(
        "Engine ready | backend=%s | segments=%d | min_zone_area=%.0f m2 | workers=%d",
        config.clipping_backend,
        config.buffer_segments,
        config.min_zone_area_sq_m,
        config.max_workers,
    )
    return engine


def parse_restricted_points(records: Sequence[Mapping[str, object]]) -> list[RestrictedPoint]:
    """Convert places-source records into ``RestrictedPoint`` instances.

    Raises:
        ModelValidationError: If a record lacks an id or a valid location.
    """
    return [RestrictedPoint.from_dict(dict(record)) for record in records]


def sync_city_catalog(
    city: CityDefinition,
    restricted_points: Sequence[RestrictedPoint],
    *,
    engine: Engine,
    updated_at: datetime | None = None,
) -> SafeZoneCatalog:
    """Build the full safe-zone catalog for one city.

    Args:
        city: The city's validated definition (buffer distance, categories).
        restricted_points: Restricted places from the places source.
        engine: Composition root from ``build_engine``.
        updated_at: Sync timestamp; defaults to now (UTC).

    Returns:
        A ``SafeZoneCatalog`` with one variant per category subset.

    Raises:
        LandGeometryNotFoundError: If the city has no land geometry.
        GeometryOperationError: If the clipping library fails.
    """
    started = time.monotonic()
    config = engine.config
    categories = [str(c) for c in city.restricted_categories]

    variants = build_catalog(
        city.id,
        restricted_points,
        city.buffer_distance_m,
        categories,
        land_masks=engine.land_masks,
        min_zone_area_sq_m=config.min_zone_area_sq_m,
        segments=config.buffer_segments,
        polygon_set=engine.polygon_set,
        max_workers=config.max_workers,
    )

    timestamp = (updated_at or datetime.now(UTC)).isoformat()
    catalog = SafeZoneCatalog.from_variants(
        variants,
        city_id=city.id,
        buffer_distance_m=city.buffer_distance_m,
        restricted_categories=categories,
        restricted_place_count=len(restricted_points),
        updated_at=timestamp,
    )

    logger.info(
        "Catalog synced | city=%s | variants=%d | places=%d | duration=%.2f s",
        city.id,
        len(catalog.variants),
        len(restricted_points),
        time.monotonic() - started,
    )
    return catalog
