"""
Address resolution (OpenStreetMap Nominatim).

Turns free-text search input ("Alexanderplatz", "Unter den Linden 1") into a coordinate the
search engine can rank green spaces by. Lookups are best-effort: a miss, an HTTP error or an
unexpected payload all come back as `None`, which the engine reports as "address not found".
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Mapping, Protocol

from gruenfinder.config.settings import Settings
from gruenfinder.core.http import get_json
from gruenfinder.domain.models import GeoPoint

logger = logging.getLogger(__name__)


async def _pause(seconds: float) -> None:
    await asyncio.sleep(seconds)


class AddressResolver(Protocol):
    async def resolve(self, text: str) -> GeoPoint | None: ...


def _first_hit(payload: Any) -> GeoPoint | None:
    if not isinstance(payload, list) or not payload:
        return None
    hit = payload[0]
    if not isinstance(hit, dict):
        return None
    try:
        return GeoPoint(lat=float(hit["lat"]), lng=float(hit["lon"]))
    except (KeyError, TypeError, ValueError):
        return None


class NominatimResolver:
    """Geocodes through the Nominatim `/search` endpoint, biased to the configured city.

    Requests carry the configured User-Agent and are spaced at least `min_interval_seconds`
    apart. Hits and clean misses are memoized in a bounded LRU (`max_cached_queries`).
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._memo: OrderedDict[str, GeoPoint | None] = OrderedDict()
        self._throttle_lock = asyncio.Lock()
        self._last_request = float("-inf")

    def _params(self, text: str) -> dict[str, Any]:
        cfg = self._settings.geocoding
        params: dict[str, Any] = {
            "q": text,
            "format": "json",
            "limit": cfg.limit,
        }
        if cfg.country_codes:
            params["countrycodes"] = cfg.country_codes
        viewbox = self._settings.map.viewbox
        if viewbox:
            params["viewbox"] = ",".join(str(v) for v in viewbox)
            if cfg.bounded:
                params["bounded"] = 1
        return params

    async def _throttle(self) -> None:
        async with self._throttle_lock:
            wait = self._last_request + self._settings.geocoding.min_interval_seconds - time.monotonic()
            if wait > 0:
                await _pause(wait)
            self._last_request = time.monotonic()

    def _remember(self, key: str, point: GeoPoint | None) -> None:
        self._memo[key] = point
        self._memo.move_to_end(key)
        while len(self._memo) > self._settings.geocoding.max_cached_queries:
            self._memo.popitem(last=False)

    async def resolve(self, text: str) -> GeoPoint | None:
        query = " ".join(text.split())
        if not query:
            return None
        key = query.lower()
        if key in self._memo:
            self._memo.move_to_end(key)
            return self._memo[key]

        cfg = self._settings.geocoding
        await self._throttle()
        try:
            payload = await get_json(
                cfg.base_url,
                params=self._params(query),
                headers={"User-Agent": cfg.user_agent},
                timeout_seconds=self._settings.app.http_timeout_seconds,
            )
        except Exception as exc:
            # Transient failures are not memoized so the next search retries.
            logger.warning("Geocoding %r failed: %s", query, exc)
            return None

        point = _first_hit(payload)
        if point is None:
            logger.info("Geocoding %r returned no match", query)
        self._remember(key, point)
        return point


class StaticResolver:
    """Dictionary-backed resolver for offline use and tests (case-insensitive)."""

    def __init__(self, places: Mapping[str, GeoPoint]):
        self._places = {k.strip().lower(): v for k, v in places.items()}

    async def resolve(self, text: str) -> GeoPoint | None:
        return self._places.get(" ".join(text.split()).lower())
