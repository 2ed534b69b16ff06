from __future__ import annotations

# This module is the search engine over the green space catalog.
# It answers two kinds of questions:
# - "which green spaces match these criteria?" (filter_points)
# - "which green space is closest to this coordinate?" (find_nearest)
#
# Design goals:
# - Pure with respect to the catalog: it reads `catalog.get_all()` and returns new sequences;
#   committing a result as the catalog's `filtered` view is the caller's decision.
# - Fail open on the geocoder: an address that does not resolve never hides results.

import logging
import math
from typing import Awaitable, Callable, Iterable

from gruenfinder.catalog.state import Catalog
from gruenfinder.core.geo import distance_m, travel_time
from gruenfinder.domain.models import (
    FilterResult,
    FilterSpec,
    GeoPoint,
    NearestResult,
    PointOfInterest,
    SizeCategory,
)

logger = logging.getLogger(__name__)

AddressResolverFn = Callable[[str], Awaitable[GeoPoint | None]]

# Half-open [min, max) hectare ranges; mirrors `size_categories` in defaults.yaml.
SIZE_RANGES: dict[SizeCategory, tuple[float, float]] = {
    "small": (0.0, 1.0),
    "medium": (1.0, 10.0),
    "large": (10.0, math.inf),
}


def size_category(size_ha: float, *, ranges: dict[SizeCategory, tuple[float, float]] | None = None) -> SizeCategory:
    """Return the size category whose `[min, max)` range contains `size_ha`."""
    ranges = ranges or SIZE_RANGES
    for name, (lo, hi) in ranges.items():
        if lo <= size_ha < hi:
            return name
    return "large"


def matches_size(
    size_ha: float,
    categories: Iterable[SizeCategory],
    *,
    ranges: dict[SizeCategory, tuple[float, float]] | None = None,
) -> bool:
    """True when no categories are selected or `size_ha` falls in at least one of them."""
    ranges = ranges or SIZE_RANGES
    selected = list(categories)
    if not selected:
        return True
    return any(ranges[c][0] <= size_ha < ranges[c][1] for c in selected)


def _has_all(tags: frozenset[str], required: frozenset[str]) -> bool:
    return not required or required.issubset(tags)


def _distance_from(origin: GeoPoint, poi: PointOfInterest) -> float:
    anchor = poi.anchor
    return distance_m(origin.lat, origin.lng, anchor.lat, anchor.lng)


def passes_filters(
    poi: PointOfInterest,
    spec: FilterSpec,
    *,
    user_location: GeoPoint | None,
    size_ranges: dict[SizeCategory, tuple[float, float]] | None = None,
) -> bool:
    """Apply every predicate group (AND across groups)."""
    # Distance is inert unless both the user location and a max distance are known.
    if user_location is not None and spec.max_distance_m is not None:
        if _distance_from(user_location, poi) > spec.max_distance_m:
            return False
    if not matches_size(poi.size_ha, spec.size_categories, ranges=size_ranges):
        return False
    if not _has_all(poi.facilities, spec.required_facilities):
        return False
    if not _has_all(poi.accessibility, spec.required_accessibility):
        return False
    return True


async def _resolve_anchor(text: str, resolve_address: AddressResolverFn | None) -> GeoPoint | None:
    if resolve_address is None:
        logger.info("No address resolver configured; ignoring search text %r", text)
        return None
    try:
        anchor = await resolve_address(text)
    except Exception as exc:
        logger.warning("Address lookup failed for %r: %s", text, exc)
        return None
    if anchor is None:
        logger.info("Address %r did not resolve", text)
    return anchor


async def filter_points(
    catalog: Catalog,
    spec: FilterSpec,
    *,
    user_location: GeoPoint | None = None,
    resolve_address: AddressResolverFn | None = None,
    size_ranges: dict[SizeCategory, tuple[float, float]] | None = None,
) -> FilterResult:
    """Filter the full catalog by `spec`.

    When `spec.search_text` resolves to a coordinate, matches are ranked by ascending distance
    from it (stable: ties keep catalog order). When it does not, matches keep catalog order and
    `address_resolved` is False.
    """
    if not isinstance(spec, FilterSpec):
        raise TypeError(f"spec must be a FilterSpec, got {type(spec).__name__}")

    anchor: GeoPoint | None = None
    address_resolved: bool | None = None
    if spec.search_text:
        anchor = await _resolve_anchor(spec.search_text, resolve_address)
        address_resolved = anchor is not None

    items = [
        p
        for p in catalog.get_all()
        if passes_filters(p, spec, user_location=user_location, size_ranges=size_ranges)
    ]

    distances: dict[str, float] = {}
    if anchor is not None:
        distances = {str(p.id): _distance_from(anchor, p) for p in items}
        # list.sort is stable, so exact ties keep catalog order.
        items.sort(key=lambda p: distances[str(p.id)])

    return FilterResult(
        items=items,
        search_anchor=anchor,
        address_resolved=address_resolved,
        distances_to_search=distances,
    )


def find_nearest(
    catalog: Catalog,
    lat: float,
    lng: float,
    *,
    mode: str = "walking",
    speeds: dict[str, float] | None = None,
) -> NearestResult | None:
    """Return the green space closest to (lat, lng) over the full catalog, or None if empty.

    On exact distance ties the first green space in catalog order wins.
    """
    origin = GeoPoint(lat=lat, lng=lng)
    nearest: PointOfInterest | None = None
    best = math.inf
    for poi in catalog.get_all():
        d = _distance_from(origin, poi)
        if d < best:
            best = d
            nearest = poi

    if nearest is None:
        return None
    return NearestResult(poi=nearest, distance_m=best, travel_time=travel_time(best, mode, speeds=speeds))
