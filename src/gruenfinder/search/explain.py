"""
Small formatting helpers shared by the CLI and the API.

The engine only makes "no results", "address not found" and "location unavailable"
distinguishable; these helpers turn those cases into messages.
"""

from __future__ import annotations

from gruenfinder.domain.models import FilterResult, NearestResult, PointOfInterest


def display_tag(tag: str) -> str:
    """`public_transport` -> `Public transport`."""
    text = tag.replace("_", " ")
    return text[:1].upper() + text[1:]


def filter_summary(result: FilterResult) -> str:
    if result.address_not_found:
        if result.items:
            return f"Address not found. Showing {_count(len(result.items))} matching your other criteria."
        return "Address not found and no green spaces match your other criteria."
    if not result.items:
        return "No green spaces match your criteria."
    if result.search_anchor is not None:
        return f"Found {_count(len(result.items))} matching your criteria, nearest to your search first."
    return f"Found {_count(len(result.items))} matching your criteria."


def nearest_summary(result: NearestResult | None) -> str:
    if result is None:
        return "Could not find any green spaces."
    return f"Found nearest green space: {result.poi.name} ({result.travel_time.label})"


def one_line(poi: PointOfInterest, *, distance_m: float | None = None) -> str:
    parts = [f"[{poi.id}] {poi.name}", poi.category, f"{poi.size_ha:g} ha"]
    if distance_m is not None:
        parts.append(f"{distance_m / 1000:.2f} km")
    return " | ".join(parts)


def _count(n: int) -> str:
    return "1 green space" if n == 1 else f"{n} green spaces"
