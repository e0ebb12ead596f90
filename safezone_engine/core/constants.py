"""Shared engine constants.

Earth model, local-projection scale factors, and the defaults used when
a city does not override them.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Earth model
# ---------------------------------------------------------------------------

EARTH_RADIUS_M: float = 6_371_000.0
"""Mean earth radius in metres used by all spherical formulas."""

# ---------------------------------------------------------------------------
# Local tangent-plane projection
# ---------------------------------------------------------------------------

METRES_PER_DEGREE_LAT: float = 111_132.0
"""Metres per degree of latitude."""

METRES_PER_DEGREE_LNG_EQUATOR: float = 111_320.0
"""Metres per degree of longitude at the equator (scaled by cos(lat))."""

MIN_COS_LAT: float = 1e-6
"""Cosine floor that keeps the longitude scale finite near the poles."""

DEGENERATE_AREA_EPSILON: float = 1e-6
"""Projected signed area below which a ring centroid falls back to its first vertex."""

MIN_RING_POINTS: int = 4
"""A closed ring needs three distinct vertices plus the closing point."""

# ---------------------------------------------------------------------------
# Engine defaults
# ---------------------------------------------------------------------------

DEFAULT_MIN_ZONE_AREA_SQ_M: float = 5_000.0
DEFAULT_BUFFER_SEGMENTS: int = 64
DEFAULT_CLIPPING_BACKEND: str = "shapely"
DEFAULT_MAX_WORKERS: int = 4

EMPTY_SUBSET_KEY: str = "none"
"""Canonical cache key for the empty category subset."""

CATEGORY_KEY_SEPARATOR: str = "|"

SQ_METRES_PER_HECTARE: float = 10_000.0
