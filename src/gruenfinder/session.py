"""
Explorer session: the one object that owns catalog state.

Instead of a module-level singleton, callers (API app, CLI run, tests) build an
`ExplorerSession` and pass it around. It holds:
- the `Catalog` (all + filtered),
- the optional user location (last write wins; queries read whatever is current),
- the collaborators (data source, address resolver, weather provider) and settings.

`load()` must complete before `apply_filters()` / `find_nearest()`; nothing here locks, since all
calls run on one event loop and catalog updates are copy-then-swap.
"""

from __future__ import annotations

import logging

from gruenfinder.catalog.sources import TieredDataSource
from gruenfinder.catalog.state import Catalog, CatalogSource
from gruenfinder.config.settings import Settings, get_settings
from gruenfinder.core.geo import haversine_m, travel_time
from gruenfinder.core.routing import directions_url
from gruenfinder.domain.models import (
    FilterResult,
    FilterSpec,
    GeoPoint,
    GreenSpaceDetails,
    LoadResult,
    NearestResult,
    PoiId,
    SizeCategory,
)
from gruenfinder.ingestion.geocoding import AddressResolver, NominatimResolver
from gruenfinder.ingestion.weather_client import OpenWeatherMapClient, WeatherProvider
from gruenfinder.search.engine import filter_points, find_nearest, size_category
from gruenfinder.search.explain import display_tag

logger = logging.getLogger(__name__)


class ExplorerSession:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        source: CatalogSource | None = None,
        resolver: AddressResolver | None = None,
        weather: WeatherProvider | None = None,
    ):
        # Injected collaborators keep tests offline; real ones are built from settings.
        self.settings = settings or get_settings()
        self.catalog = Catalog()
        self.user_location: GeoPoint | None = None
        self._source = source or TieredDataSource.from_settings(self.settings)
        self._resolver = resolver or NominatimResolver(self.settings)
        self._weather = weather or OpenWeatherMapClient(self.settings)

    @property
    def size_ranges(self) -> dict[SizeCategory, tuple[float, float]]:
        return {name: (r.min, r.max) for name, r in self.settings.size_categories.items()}

    @property
    def speeds(self) -> dict[str, float]:
        return self.settings.travel.speeds_m_per_min

    async def load(self) -> LoadResult:
        result = await self.catalog.load(self._source)
        logger.info("Catalog ready: %d green spaces (tier=%s)", len(result.items), result.tier)
        return result

    def set_user_location(self, location: GeoPoint | None) -> None:
        self.user_location = location

    async def apply_filters(self, spec: FilterSpec) -> FilterResult:
        """Filter the catalog and commit the result as the new `filtered` view."""
        result = await filter_points(
            self.catalog,
            spec,
            user_location=self.user_location,
            resolve_address=self._resolver.resolve,
            size_ranges=self.size_ranges,
        )
        self.catalog.commit_filtered(result.items)
        return result

    def reset_filters(self) -> None:
        self.catalog.reset_filtered()

    def find_nearest(self, location: GeoPoint | None = None, *, mode: str | None = None) -> NearestResult | None:
        """Nearest green space to `location` (defaults to the user location).

        Raises `LookupError` when neither is available ("location unavailable").
        """
        origin = location or self.user_location
        if origin is None:
            raise LookupError("No location available for a nearest search")
        return find_nearest(
            self.catalog,
            origin.lat,
            origin.lng,
            mode=mode or self.settings.travel.default_mode,
            speeds=self.speeds,
        )

    async def details(self, poi_id: PoiId) -> GreenSpaceDetails | None:
        """Assemble the detail view for one green space (None when the id is unknown)."""
        poi = self.catalog.get_by_id(poi_id)
        if poi is None:
            return None

        anchor = poi.anchor
        weather = await self._weather.get(anchor.lat, anchor.lng)

        display = self.settings.categories.get(poi.category)
        size_cat = size_category(poi.size_ha, ranges=self.size_ranges)
        size_name = self.settings.size_categories[size_cat].name or size_cat

        distance = None
        eta = None
        route = None
        if self.user_location is not None:
            distance = haversine_m(self.user_location, anchor)
            mode = self.settings.travel.default_mode
            eta = travel_time(distance, mode, speeds=self.speeds)
            route = directions_url(
                self.user_location,
                anchor,
                mode=self.settings.routing.travel_mode,
                base_url=self.settings.routing.directions_url,
            )

        return GreenSpaceDetails(
            poi=poi,
            category_name=display.name if display else display_tag(poi.category),
            category_color=display.color if display else None,
            size_category=size_cat,
            size_label=f"{poi.size_ha:g} hectares ({size_name})",
            weather=weather,
            facilities=[
                {"tag": t, "label": display_tag(t), "icon": self.settings.facility_icons.get(t, "fa-check")}
                for t in sorted(poi.facilities)
            ],
            accessibility=[
                {"tag": t, "label": display_tag(t), "icon": self.settings.accessibility_icons.get(t, "fa-check")}
                for t in sorted(poi.accessibility)
            ],
            distance_m=distance,
            travel_time=eta,
            directions_url=route,
        )
