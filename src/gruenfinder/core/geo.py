from __future__ import annotations

from math import asin, cos, radians, sin, sqrt

from gruenfinder.domain.models import GeoPoint, TravelTime

"""
Geospatial helpers.

Great-circle distance on a spherical Earth plus travel-time estimates. At the size of a city
catalog a linear scan with haversine is all the search engine needs, so there is no GIS
dependency here.
"""

EARTH_RADIUS_M = 6_371_000

# Meters per minute; mirrors `travel.speeds_m_per_min` in defaults.yaml.
DEFAULT_SPEEDS_M_PER_MIN: dict[str, float] = {
    "walking": 80,
    "cycling": 250,
    "public_transport": 400,
    "driving": 600,
}


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute great-circle distance in meters between two coordinates (haversine)."""
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    dphi = radians(lat2 - lat1)
    dlmb = radians(lon2 - lon1)

    h = sin(dphi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(min(1.0, sqrt(h)))


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """`distance_m` for two `GeoPoint`s."""
    return distance_m(a.lat, a.lng, b.lat, b.lng)


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def format_duration(hours: int, minutes: int) -> str:
    if hours == 0 and minutes == 0:
        return "less than a minute"
    if hours == 0:
        return _plural(minutes, "minute")
    if minutes == 0:
        return _plural(hours, "hour")
    return f"{_plural(hours, 'hour')} and {_plural(minutes, 'minute')}"


def travel_time(
    distance: float,
    mode: str = "walking",
    *,
    speeds: dict[str, float] | None = None,
) -> TravelTime:
    """Estimate how long `distance` meters take in `mode`.

    Unknown modes fall back to the walking speed and are reported as "walking". Minutes are
    rounded to the nearest whole minute; anything that rounds to zero is "less than a minute".
    """
    table = speeds or DEFAULT_SPEEDS_M_PER_MIN
    if not table.get(mode):
        mode = "walking"
    speed = table.get(mode) or DEFAULT_SPEEDS_M_PER_MIN["walking"]
    total_minutes = int(round(max(distance, 0.0) / speed))
    hours, minutes = divmod(total_minutes, 60)
    return TravelTime(mode=mode, hours=hours, minutes=minutes, label=format_duration(hours, minutes))


def travel_time_label(distance: float, mode: str = "walking", *, speeds: dict[str, float] | None = None) -> str:
    return travel_time(distance, mode, speeds=speeds).label
