"""Data model for a restricted place supplied by the places source."""

from __future__ import annotations

from dataclasses import dataclass

from safezone_engine.models.geometry import LatLng, ModelValidationError


@dataclass(frozen=True, slots=True)
class RestrictedPoint:
    """A place that triggers an exclusion buffer.

    Attributes:
        id: Places-source identifier.
        location: Place location.
        category: Restricted category, or ``None`` when the place is
            restricted regardless of which categories are selected.
        name: Display name, informational only.
    """

    id: str
    location: LatLng
    category: str | None = None
    name: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location.to_dict(),
            "restricted_category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RestrictedPoint:
        """Deserialise a places-source record.

        Accepts the category under ``restricted_category``,
        ``restrictedCategory`` or ``category``.  Empty strings count as
        "no category".

        Raises:
            ModelValidationError: If ``id`` or ``location`` is missing or malformed.
        """
        place_id = data.get("id")
        if not place_id:
            raise ModelValidationError("RestrictedPoint", "id", place_id, "must not be empty")

        location_raw = data.get("location")
        if not isinstance(location_raw, dict):
            raise ModelValidationError(
                "RestrictedPoint", "location", location_raw, "must be a {lat, lng} mapping"
            )

        category = None
        for key in ("restricted_category", "restrictedCategory", "category"):
            value = data.get(key)
            if value:
                category = str(value)
                break

        return cls(
            id=str(place_id),
            location=LatLng.from_dict(location_raw),
            category=category,
            name=str(data.get("name", "")),
        )
