"""Unit tests for the category-subset catalog."""

from __future__ import annotations

import pytest

from safezone_engine.activities.build_catalog import (
    build_catalog,
    canonical_key,
    category_subsets,
    filter_restricted_points,
    select_variant,
)
from safezone_engine.activities.land_mask import LandGeometryNotFoundError, LandMaskCache
from safezone_engine.core.config import RestrictedCategory
from safezone_engine.models.places import RestrictedPoint

CATEGORIES = ["school", "kindergarten", "rehab_center"]
BUFFER_M = 200.0


def _total_area(variant: object) -> float:
    return sum(zone.area_sq_m for zone in variant.zones)  # type: ignore[attr-defined]


class TestCanonicalKey:
    def test_empty_is_none(self) -> None:
        assert canonical_key([]) == "none"

    def test_order_independent(self) -> None:
        assert canonical_key(["school", "kindergarten"]) == "kindergarten|school"
        assert canonical_key(["kindergarten", "school"]) == "kindergarten|school"

    def test_duplicates_collapsed(self) -> None:
        assert canonical_key(["school", "school"]) == "school"

    def test_enum_members_use_values(self) -> None:
        key = canonical_key([RestrictedCategory.SCHOOL, RestrictedCategory.REHAB_CENTER])
        assert key == "rehab_center|school"


class TestCategorySubsets:
    @pytest.mark.parametrize("k", [0, 1, 2, 3, 4, 5])
    def test_powerset_size(self, k: int) -> None:
        categories = [f"c{i}" for i in range(k)]
        subsets = category_subsets(categories)
        assert len(subsets) == 2**k
        assert len({canonical_key(s) for s in subsets}) == 2**k

    def test_empty_subset_first(self) -> None:
        assert category_subsets(CATEGORIES)[0] == []

    def test_each_subset_sorted(self) -> None:
        for subset in category_subsets(CATEGORIES):
            assert subset == sorted(subset)

    def test_duplicates_ignored(self) -> None:
        assert len(category_subsets(["school", "school", "rehab_center"])) == 4


class TestFilterRestrictedPoints:
    def test_uncategorised_always_included(self, city_places: list[RestrictedPoint]) -> None:
        ids = [p.id for p in filter_restricted_points(city_places, [])]
        assert ids == ["unknown-1"]

    def test_selected_categories(self, city_places: list[RestrictedPoint]) -> None:
        ids = {p.id for p in filter_restricted_points(city_places, ["school"])}
        assert ids == {"school-1", "school-outside", "unknown-1"}


class TestBuildCatalog:
    """Full catalog over the Montevideo-sized test block."""

    def test_one_variant_per_subset(
        self, land_masks: LandMaskCache, city_places: list[RestrictedPoint]
    ) -> None:
        variants = build_catalog("montevideo", city_places, BUFFER_M, CATEGORIES, land_masks=land_masks)
        keys = [v.key for v in variants]
        assert len(variants) == 8
        assert len(set(keys)) == 8
        assert "none" in keys
        assert keys[0] == "none"

    def test_meta_and_place_counts(
        self, land_masks: LandMaskCache, city_places: list[RestrictedPoint]
    ) -> None:
        variants = build_catalog("montevideo", city_places, BUFFER_M, CATEGORIES, land_masks=land_masks)
        by_key = {v.key: v for v in variants}
        # The uncategorised place always applies; the off-land school never does
        assert by_key["none"].meta.restricted_place_count == 1
        assert by_key["school"].meta.restricted_place_count == 2
        assert by_key["kindergarten|rehab_center|school"].meta.restricted_place_count == 4
        assert all(v.meta.buffer_distance_m == BUFFER_M for v in variants)

    def test_categories_sorted(
        self, land_masks: LandMaskCache, city_places: list[RestrictedPoint]
    ) -> None:
        variants = build_catalog("montevideo", city_places, BUFFER_M, CATEGORIES, land_masks=land_masks)
        for variant in variants:
            assert variant.categories == sorted(variant.categories)

    def test_more_categories_never_add_area(
        self, land_masks: LandMaskCache, city_places: list[RestrictedPoint]
    ) -> None:
        by_key = {
            v.key: v
            for v in build_catalog(
                "montevideo", city_places, BUFFER_M, CATEGORIES, land_masks=land_masks
            )
        }
        assert _total_area(by_key["school"]) < _total_area(by_key["none"])
        assert _total_area(by_key["kindergarten|rehab_center|school"]) < _total_area(
            by_key["kindergarten|school"]
        )

    def test_parallel_matches_serial(
        self, land_masks: LandMaskCache, city_places: list[RestrictedPoint]
    ) -> None:
        serial = build_catalog(
            "montevideo", city_places, BUFFER_M, CATEGORIES, land_masks=land_masks, max_workers=1
        )
        parallel = build_catalog(
            "montevideo", city_places, BUFFER_M, CATEGORIES, land_masks=land_masks, max_workers=8
        )
        assert [v.key for v in serial] == [v.key for v in parallel]
        for a, b in zip(serial, parallel, strict=True):
            assert _total_area(a) == pytest.approx(_total_area(b))

    def test_no_categories_single_variant(
        self, land_masks: LandMaskCache, city_places: list[RestrictedPoint]
    ) -> None:
        variants = build_catalog("montevideo", city_places, BUFFER_M, [], land_masks=land_masks)
        assert [v.key for v in variants] == ["none"]

    def test_missing_land_raises(self, land_masks: LandMaskCache) -> None:
        with pytest.raises(LandGeometryNotFoundError):
            build_catalog("atlantis", [], BUFFER_M, CATEGORIES, land_masks=land_masks)


class TestSelectVariant:
    @pytest.fixture()
    def variants(self, land_masks: LandMaskCache, city_places: list[RestrictedPoint]) -> list:
        return build_catalog("montevideo", city_places, BUFFER_M, CATEGORIES, land_masks=land_masks)

    def test_all_allowed_when_not_requested(self, variants: list) -> None:
        variant = select_variant(variants, CATEGORIES)
        assert variant is not None
        assert variant.key == "kindergarten|rehab_center|school"

    def test_unknown_categories_ignored(self, variants: list) -> None:
        variant = select_variant(variants, CATEGORIES, ["school", "casino"])
        assert variant is not None
        assert variant.key == "school"

    def test_empty_request_is_none_key(self, variants: list) -> None:
        variant = select_variant(variants, CATEGORIES, [])
        assert variant is not None
        assert variant.key == "none"

    def test_missing_variant(self) -> None:
        assert select_variant([], CATEGORIES) is None
