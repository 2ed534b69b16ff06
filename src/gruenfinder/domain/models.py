"""
Domain models (Pydantic).

These types are the contract between the catalog, the search engine and the surfaces:
- catalog entities (`PointOfInterest` with its `Geometry`)
- query input (`FilterSpec`, `GeoPoint` for the user location)
- engine output (`FilterResult`, `NearestResult`, `TravelTime`)
- collaborator output (`WeatherReport`, `LoadResult`)

Records accept both the nested source layout (`properties.size_ha`, `type`) and a flat layout,
so exported datasets and hand-written fixtures load through the same model.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

Category = Literal["park", "garden", "forest", "playground", "cemetery", "meadow", "bbq_area", "other"]
SizeCategory = Literal["small", "medium", "large"]
LoadTier = Literal["primary", "fallback", "default"]
PoiId = Union[int, str]


class GeoPoint(BaseModel):
    """A geographic point in decimal degrees (no range validation)."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class Geometry(BaseModel):
    """GeoJSON-style footprint: `Point` or `Polygon`, coordinates as [lng, lat]."""

    model_config = ConfigDict(frozen=True)

    type: Literal["Point", "Polygon"]
    coordinates: Any

    @model_validator(mode="after")
    def _validate_shape(self) -> "Geometry":
        if self.type == "Point":
            if not _is_position(self.coordinates):
                raise ValueError("Point geometry needs [lng, lat] coordinates")
            return self
        rings = self.coordinates
        if not isinstance(rings, (list, tuple)) or not rings:
            raise ValueError("Polygon geometry needs at least one ring")
        first = rings[0]
        if not isinstance(first, (list, tuple)) or not first or not _is_position(first[0]):
            raise ValueError("Polygon geometry needs at least one [lng, lat] vertex in its first ring")
        return self

    @property
    def anchor(self) -> GeoPoint:
        """Representative point: the point itself, or the first vertex of the first ring."""
        lng, lat = (self.coordinates if self.type == "Point" else self.coordinates[0][0])[:2]
        return GeoPoint(lat=float(lat), lng=float(lng))


def _is_position(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) >= 2
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value[:2])
    )


def _normalize_tags(tags: Any) -> frozenset[str]:
    if tags is None:
        return frozenset()
    if isinstance(tags, str):
        tags = [tags]
    return frozenset(t.strip().lower() for t in tags if isinstance(t, str) and t.strip())


class PointOfInterest(BaseModel):
    """One green space in the catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: PoiId
    name: str
    category: Category = Field(default="other", alias="type")
    geometry: Geometry
    size_ha: float = Field(default=0.0, ge=0)
    facilities: frozenset[str] = Field(default_factory=frozenset)
    accessibility: frozenset[str] = Field(default_factory=frozenset)
    opening_hours: str | None = None
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_properties(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("properties"), dict):
            return data
        flat = {k: v for k, v in data.items() if k != "properties"}
        for key, value in data["properties"].items():
            flat.setdefault(key, value)
        return flat

    @field_validator("facilities", "accessibility", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> frozenset[str]:
        return _normalize_tags(v)

    @field_serializer("facilities", "accessibility", when_used="json")
    def _sorted_tags(self, v: frozenset[str]) -> list[str]:
        return sorted(v)

    @property
    def anchor(self) -> GeoPoint:
        return self.geometry.anchor


class FilterSpec(BaseModel):
    """Criteria for one filtering pass. Empty sets mean "no constraint"."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    search_text: str = ""
    max_distance_m: float | None = Field(default=None, gt=0)
    size_categories: frozenset[SizeCategory] = Field(default_factory=frozenset)
    required_facilities: frozenset[str] = Field(default_factory=frozenset)
    required_accessibility: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("search_text", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("required_facilities", "required_accessibility", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> frozenset[str]:
        return _normalize_tags(v)


class TravelTime(BaseModel):
    """Structured travel-time estimate plus its English label."""

    mode: str
    hours: int = Field(..., ge=0)
    minutes: int = Field(..., ge=0, lt=60)
    label: str

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes


class FilterResult(BaseModel):
    """Outcome of a filter pass.

    `address_resolved` is None when no search text was given, False when geocoding failed
    (results are still filtered, just not ranked), True when `items` are ranked by
    `distances_to_search`.
    """

    items: list[PointOfInterest]
    search_anchor: GeoPoint | None = None
    address_resolved: bool | None = None
    distances_to_search: dict[str, float] = Field(default_factory=dict)

    @property
    def address_not_found(self) -> bool:
        return self.address_resolved is False


class NearestResult(BaseModel):
    poi: PointOfInterest
    distance_m: float
    travel_time: TravelTime


class WeatherReport(BaseModel):
    temperature_c: int
    condition: str
    icon: str
    source: Literal["live", "default"] = "default"


class LoadResult(BaseModel):
    """A fully acquired collection, tagged with the fallback tier that produced it."""

    items: list[PointOfInterest]
    tier: LoadTier
    source: str


class GreenSpaceDetails(BaseModel):
    """Everything the detail panel shows for one green space."""

    poi: PointOfInterest
    category_name: str
    category_color: str | None = None
    size_category: SizeCategory
    size_label: str
    weather: WeatherReport
    facilities: list[dict[str, str]] = Field(default_factory=list)
    accessibility: list[dict[str, str]] = Field(default_factory=list)
    distance_m: float | None = None
    travel_time: TravelTime | None = None
    directions_url: str | None = None
