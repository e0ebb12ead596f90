"""Pydantic model for the safe-zone catalog handed to the cache writer.

One document per city per sync run.  It holds every pre-computed
``CacheVariant`` plus the parameters they were computed with, so the
query endpoint can serve any category subset without recomputation.

The document is schema-versioned; ``from_variants`` is the factory used
by the sync orchestrator and ``to_variants`` is the inverse used by
readers.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

# Schema version for forward compatibility
SCHEMA_VERSION = "safe-zone-catalog-v1"


class ZoneDocument(BaseModel):
    """Serialised ``SafeZone``.

    Attributes:
        id: Zone id within its variant.
        centroid: ``{"lat": ..., "lng": ...}``.
        paths: ``[outer, *holes]`` rings of ``{"lat", "lng"}`` points.
        area_sq_m: Net area in square metres.
        min_distance_m: Distance to the nearest restricted place, ``None``
            when no restricted place applied.
    """

    id: str
    centroid: dict[str, float]
    paths: list[list[dict[str, float]]] = Field(default_factory=list)
    area_sq_m: float = 0.0
    min_distance_m: float | None = None


class VariantMetaDocument(BaseModel):
    buffer_distance_m: float
    restricted_place_count: int = 0


class VariantDocument(BaseModel):
    """Serialised ``CacheVariant``."""

    key: str
    categories: list[str] = Field(default_factory=list)
    zones: list[ZoneDocument] = Field(default_factory=list)
    meta: VariantMetaDocument


class SafeZoneCatalog(BaseModel):
    """Top-level catalog document for one city.

    Attributes:
        schema_version: Schema identifier for forward compatibility.
        city_id: City the catalog belongs to.
        updated_at: Sync timestamp (ISO 8601, UTC).
        buffer_distance_m: Exclusion radius used for every variant.
        restricted_categories: The city's restricted categories.
        restricted_place_count: Restricted places received from the places source.
        variants: One entry per category subset.
    """

    schema_version: str = Field(default=SCHEMA_VERSION, alias="$schema")
    city_id: str
    updated_at: str = ""
    buffer_distance_m: float
    restricted_categories: list[str] = Field(default_factory=list)
    restricted_place_count: int = 0
    variants: list[VariantDocument] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_variants(
        cls,
        variants: list[object],
        *,
        city_id: str,
        buffer_distance_m: float,
        restricted_categories: list[str],
        restricted_place_count: int = 0,
        updated_at: str = "",
    ) -> SafeZoneCatalog:
        """Construct a catalog from computed ``CacheVariant`` instances.

        Args:
            variants: ``CacheVariant`` instances from ``build_catalog``.
            city_id: City the variants were computed for.
            buffer_distance_m: Exclusion radius in metres.
            restricted_categories: The city's restricted categories.
            restricted_place_count: Size of the raw restricted-place input.
            updated_at: Sync timestamp (ISO 8601).  If empty, uses the
                current UTC time.

        Raises:
            TypeError: If an element is not a ``CacheVariant``.
        """
        from safezone_engine.models.safe_zone import CacheVariant

        documents: list[VariantDocument] = []
        for variant in variants:
            if not isinstance(variant, CacheVariant):
                msg = f"Expected CacheVariant instance, got {type(variant).__name__}"
                raise TypeError(msg)
            documents.append(VariantDocument.model_validate(variant.to_dict()))

        if not updated_at:
            updated_at = datetime.now(UTC).isoformat()

        return cls(
            city_id=city_id,
            updated_at=updated_at,
            buffer_distance_m=buffer_distance_m,
            restricted_categories=[str(c) for c in restricted_categories],
            restricted_place_count=restricted_place_count,
            variants=documents,
        )

    def to_variants(self) -> list[object]:
        """Rebuild ``CacheVariant`` instances from the document."""
        from safezone_engine.models.safe_zone import CacheVariant

        return [CacheVariant.from_dict(v.model_dump()) for v in self.variants]

    @property
    def variant_keys(self) -> list[str]:
        return [v.key for v in self.variants]

    def to_json(self, *, indent: int = 2) -> str:
        """Serialise to a JSON string using the ``$schema`` alias."""
        return self.model_dump_json(indent=indent, by_alias=True)

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict for the cache writer."""
        return self.model_dump(by_alias=True)  # type: ignore[return-value]
