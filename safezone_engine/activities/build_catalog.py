"""Safe-zone catalog: one pre-computed variant per category subset.

Users toggle restricted categories on and off, so the sync job computes
safe zones for *every* subset of a city's categories up front and the
query endpoint only looks the matching variant up.

Cost: ``k`` categories means ``2**k`` safe-zone computations.  Real city
configurations keep ``k <= 4-5`` (at most 32 variants).  Subsets are
independent and run on a thread pool; GEOS releases the GIL during
clipping.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from safezone_engine.activities.compute_safe_zones import compute_safe_zones
from safezone_engine.core.constants import (
    CATEGORY_KEY_SEPARATOR,
    DEFAULT_BUFFER_SEGMENTS,
    DEFAULT_MAX_WORKERS,
    DEFAULT_MIN_ZONE_AREA_SQ_M,
    EMPTY_SUBSET_KEY,
)
from safezone_engine.models.safe_zone import CacheVariant, CacheVariantMeta

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from safezone_engine.activities.land_mask import LandMaskCache
    from safezone_engine.clipping.polygon_set import PolygonSet
    from safezone_engine.models.places import RestrictedPoint

logger = logging.getLogger(__name__)


def canonical_key(categories: Iterable[str]) -> str:
    """Cache key for a category subset.

    ``"none"`` for the empty subset; otherwise the unique categories,
    sorted, joined by ``"|"``.
    """
    members = sorted({str(c) for c in categories})
    if not members:
        return EMPTY_SUBSET_KEY
    return CATEGORY_KEY_SEPARATOR.join(members)


def category_subsets(categories: Iterable[str]) -> list[list[str]]:
    """Every subset of the unique *categories*, each sorted.

    The empty subset comes first; ``k`` unique categories give ``2**k`` subsets.
    """
    unique = list(dict.fromkeys(str(c) for c in categories))
    subsets: list[list[str]] = [[]]
    for category in unique:
        subsets.extend([*subset, category] for subset in list(subsets))
    return [sorted(subset) for subset in subsets]


def filter_restricted_points(
    points: Iterable[RestrictedPoint],
    categories: Iterable[str],
) -> list[RestrictedPoint]:
    """Points that apply when *categories* are selected.

    A point without a category always applies.
    """
    selected = {str(c) for c in categories}
    return [p for p in points if p.category is None or p.category in selected]


def build_catalog(
    city_id: str,
    restricted_points: Sequence[RestrictedPoint],
    buffer_distance_m: float,
    categories: Sequence[str],
    *,
    land_masks: LandMaskCache,
    min_zone_area_sq_m: float = DEFAULT_MIN_ZONE_AREA_SQ_M,
    segments: int = DEFAULT_BUFFER_SEGMENTS,
    polygon_set: PolygonSet | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[CacheVariant]:
    """Compute a ``CacheVariant`` for every subset of *categories*.

    Restricted places outside the city's land are ignored.  Variants are
    returned in subset order (empty subset first) regardless of which
    worker finishes first.

    Raises:
        LandGeometryNotFoundError: If the city has no land geometry.
        GeometryOperationError: If the clipping library fails.
    """
    land = land_masks.load(city_id)
    on_land = [p for p in restricted_points if land.contains_point(p.location)]
    subsets = category_subsets(categories)

    logger.info(
        "Building safe-zone catalog | city=%s | categories=%d | variants=%d | "
        "places=%d | on_land=%d | buffer=%.0f m",
        city_id,
        len(subsets[-1]),
        len(subsets),
        len(restricted_points),
        len(on_land),
        buffer_distance_m,
    )

    def _variant(subset: list[str]) -> CacheVariant:
        points = filter_restricted_points(on_land, subset)
        zones = compute_safe_zones(
            land.polygons,
            points,
            buffer_distance_m,
            min_zone_area_sq_m,
            segments=segments,
            polygon_set=polygon_set,
        )
        key = canonical_key(subset)
        logger.debug(
            "Catalog variant computed | city=%s | key=%s | places=%d | zones=%d",
            city_id,
            key,
            len(points),
            len(zones),
        )
        return CacheVariant(
            key=key,
            categories=subset,
            zones=zones,
            meta=CacheVariantMeta(
                buffer_distance_m=buffer_distance_m,
                restricted_place_count=len(points),
            ),
        )

    if max_workers <= 1 or len(subsets) == 1:
        variants = [_variant(subset) for subset in subsets]
    else:
        with ThreadPoolExecutor(
            max_workers=min(max_workers, len(subsets)),
            thread_name_prefix=f"catalog-{city_id}",
        ) as executor:
            variants = list(executor.map(_variant, subsets))

    logger.info(
        "Safe-zone catalog built | city=%s | variants=%d | zones=%d",
        city_id,
        len(variants),
        sum(len(v.zones) for v in variants),
    )
    return variants


def select_variant(
    variants: Iterable[CacheVariant],
    allowed: Iterable[str],
    requested: Iterable[str] | None = None,
) -> CacheVariant | None:
    """Look up the variant serving a category request.

    Requested categories the city does not restrict are ignored; no
    request means every allowed category.

    Returns:
        The matching variant, or ``None`` if the catalog lacks it.
    """
    allowed_set = {str(c) for c in allowed}
    wanted = allowed_set if requested is None else {str(c) for c in requested} & allowed_set
    key = canonical_key(wanted)
    return next((v for v in variants if v.key == key), None)
