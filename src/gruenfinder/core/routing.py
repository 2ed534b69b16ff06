"""
Directions links.

GruenFinder does not route; it hands the trip to an external map service. The URL follows the
Google Maps "Directions" URL scheme (`api=1`, `origin`, `destination`, `travelmode`).
"""

from __future__ import annotations

from urllib.parse import urlencode

from gruenfinder.domain.models import GeoPoint

TRAVEL_MODES = {"walking", "bicycling", "transit", "driving"}

# Engine mode names -> directions service mode names.
_MODE_ALIASES = {
    "cycling": "bicycling",
    "public_transport": "transit",
}


def directions_url(
    origin: GeoPoint,
    destination: GeoPoint,
    *,
    mode: str = "walking",
    base_url: str = "https://www.google.com/maps/dir/",
) -> str:
    travel_mode = _MODE_ALIASES.get(mode, mode)
    if travel_mode not in TRAVEL_MODES:
        raise ValueError(f"Unsupported travel mode '{mode}'")
    params = {
        "api": 1,
        "origin": f"{origin.lat},{origin.lng}",
        "destination": f"{destination.lat},{destination.lng}",
        "travelmode": travel_mode,
    }
    return f"{base_url}?{urlencode(params, safe=',')}"
