"""Engine configuration loaded from environment variables, plus the
per-city definitions the sync job iterates over.

Fail-fast validation:
    ``EngineConfig.from_env()`` and ``CityDefinition`` construction raise
    ``ConfigValidationError`` when a value is out of range, so a bad
    deployment fails at startup instead of halfway through a sync run.
"""

from __future__ import annotations

import enum
import math
import os
from dataclasses import dataclass

from safezone_engine.core.constants import (
    DEFAULT_BUFFER_SEGMENTS,
    DEFAULT_CLIPPING_BACKEND,
    DEFAULT_MAX_WORKERS,
    DEFAULT_MIN_ZONE_AREA_SQ_M,
)
from safezone_engine.core.exceptions import ConfigurationError

#: Fewer segments than this cannot approximate a disk.
MIN_BUFFER_SEGMENTS = 3


class ConfigValidationError(ConfigurationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


class UnknownCityError(ConfigurationError):
    """Raised when a city id has no definition in the registry."""

    default_stage = "config"
    default_code = "UNKNOWN_CITY"

    def __init__(self, city_id: str, available: list[str]) -> None:
        self.city_id = city_id
        super().__init__(
            f"City {city_id!r} is not configured. Available: {', '.join(available) or '(none)'}"
        )


# ---------------------------------------------------------------------------
# Engine configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable engine configuration.

    Loaded once by the sync job and threaded through the composition root.

    Attributes:
        min_zone_area_sq_m: Safe zones smaller than this are discarded.
        buffer_segments: Vertices used to approximate each exclusion disk.
        clipping_backend: Name of the registered polygon clipping backend.
        max_workers: Thread-pool size for per-subset catalog computation.
        land_geometry_dir: Directory holding ``<city_id>.geojson`` land files
            (empty when geometry is supplied in memory).
    """

    min_zone_area_sq_m: float = DEFAULT_MIN_ZONE_AREA_SQ_M
    buffer_segments: int = DEFAULT_BUFFER_SEGMENTS
    clipping_backend: str = DEFAULT_CLIPPING_BACKEND
    max_workers: int = DEFAULT_MAX_WORKERS
    land_geometry_dir: str = ""

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a
                required string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``SAFEZONE_BUFFER_SEGMENTS=abc``).
        """
        config = cls(
            min_zone_area_sq_m=float(
                os.getenv("SAFEZONE_MIN_ZONE_AREA_SQ_M", str(DEFAULT_MIN_ZONE_AREA_SQ_M))
            ),
            buffer_segments=int(
                os.getenv("SAFEZONE_BUFFER_SEGMENTS", str(DEFAULT_BUFFER_SEGMENTS))
            ),
            clipping_backend=os.getenv("SAFEZONE_CLIPPING_BACKEND", DEFAULT_CLIPPING_BACKEND),
            max_workers=int(os.getenv("SAFEZONE_MAX_WORKERS", str(DEFAULT_MAX_WORKERS))),
            land_geometry_dir=os.getenv("SAFEZONE_LAND_GEOMETRY_DIR", ""),
        )
        _validate(config)
        return config


def _validate(config: EngineConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not math.isfinite(config.min_zone_area_sq_m) or config.min_zone_area_sq_m < 0:
        raise ConfigValidationError(
            "SAFEZONE_MIN_ZONE_AREA_SQ_M",
            config.min_zone_area_sq_m,
            "must be a finite value >= 0 (square metres)",
        )

    if config.buffer_segments < MIN_BUFFER_SEGMENTS:
        raise ConfigValidationError(
            "SAFEZONE_BUFFER_SEGMENTS",
            config.buffer_segments,
            f"must be >= {MIN_BUFFER_SEGMENTS}",
        )

    if not config.clipping_backend:
        raise ConfigValidationError(
            "SAFEZONE_CLIPPING_BACKEND",
            config.clipping_backend,
            "must not be empty",
        )

    if config.max_workers < 1:
        raise ConfigValidationError(
            "SAFEZONE_MAX_WORKERS",
            config.max_workers,
            "must be >= 1",
        )


# ---------------------------------------------------------------------------
# Cities
# ---------------------------------------------------------------------------


class RestrictedCategory(enum.StrEnum):
    """Kinds of places that trigger an exclusion buffer."""

    SCHOOL = "school"
    CULTURAL_CENTER = "cultural_center"
    REHAB_CENTER = "rehab_center"
    KINDERGARTEN = "kindergarten"


@dataclass(frozen=True, slots=True)
class CityDefinition:
    """Static configuration for one supported city.

    Attributes:
        id: Stable city identifier (also the land geometry key).
        name: City name (e.g. ``"Montevideo"``).
        country: Country name.
        display_name: Label shown to users.
        buffer_distance_m: Exclusion radius around each restricted place.
        restricted_categories: Categories whose subsets are pre-computed.
    """

    id: str
    name: str
    country: str = ""
    display_name: str = ""
    buffer_distance_m: float = 200.0
    restricted_categories: tuple[RestrictedCategory, ...] = ()

    def __post_init__(self) -> None:
        if not self.id:
            raise ConfigValidationError("city.id", self.id, "must not be empty")
        if not math.isfinite(self.buffer_distance_m) or self.buffer_distance_m <= 0:
            raise ConfigValidationError(
                f"{self.id}.buffer_distance_m",
                self.buffer_distance_m,
                "must be a finite value > 0 (metres)",
            )
        for category in self.restricted_categories:
            if not isinstance(category, RestrictedCategory):
                raise ConfigValidationError(
                    f"{self.id}.restricted_categories",
                    category,
                    f"must be one of {[c.value for c in RestrictedCategory]}",
                )
        if len(set(self.restricted_categories)) != len(self.restricted_categories):
            raise ConfigValidationError(
                f"{self.id}.restricted_categories",
                list(self.restricted_categories),
                "must not contain duplicates",
            )


class CityRegistry:
    """Validated lookup of city definitions by id."""

    def __init__(self, cities: list[CityDefinition] | None = None) -> None:
        self._cities: dict[str, CityDefinition] = {}
        for city in cities or []:
            if city.id in self._cities:
                raise ConfigValidationError("city.id", city.id, "is defined more than once")
            self._cities[city.id] = city

    def get(self, city_id: str) -> CityDefinition:
        """Return the definition for *city_id*.

        Raises:
            UnknownCityError: If the city is not configured.
        """
        city = self._cities.get(city_id)
        if city is None:
            raise UnknownCityError(city_id, self.ids())
        return city

    def ids(self) -> list[str]:
        """Return the configured city ids, sorted."""
        return sorted(self._cities)

    def __contains__(self, city_id: object) -> bool:
        return city_id in self._cities

    def __len__(self) -> int:
        return len(self._cities)


MONTEVIDEO = CityDefinition(
    id="montevideo",
    name="Montevideo",
    country="Uruguay",
    display_name="Montevideo, Uruguay",
    buffer_distance_m=200.0,
    restricted_categories=(
        RestrictedCategory.SCHOOL,
        RestrictedCategory.CULTURAL_CENTER,
        RestrictedCategory.REHAB_CENTER,
        RestrictedCategory.KINDERGARTEN,
    ),
)

DEFAULT_CITY_ID = MONTEVIDEO.id


def default_city_registry() -> CityRegistry:
    """Return a registry holding the built-in city definitions."""
    return CityRegistry([MONTEVIDEO])
