"""
API routes.

Endpoints:
- GET    `/api/green-spaces`: current filtered view.
- GET    `/api/green-spaces/all`: full catalog in load order.
- POST   `/api/green-spaces/search`: apply a `FilterSpec` (commits the filtered view).
- POST   `/api/green-spaces/reset`: clear filters.
- GET    `/api/green-spaces/{poi_id}`: detail view (weather, travel time, directions link).
- PUT    `/api/location` / DELETE `/api/location`: set or clear the user location.
- GET    `/api/nearest`: nearest green space to `lat`/`lng` or the stored user location.
- GET    `/api/settings`: public settings for a front end (secrets redacted).
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, HTTPException

from gruenfinder.config.settings import get_settings
from gruenfinder.domain.models import FilterSpec, GeoPoint
from gruenfinder.search.explain import filter_summary, nearest_summary
from gruenfinder.session import ExplorerSession

router = APIRouter()


@lru_cache
def _session() -> ExplorerSession:
    return ExplorerSession(settings=get_settings())


async def loaded_session() -> ExplorerSession:
    session = _session()
    if not session.catalog.loaded:
        await session.load()
    return session


def _catalog_payload(session: ExplorerSession, items) -> dict[str, Any]:
    load = session.catalog.last_load
    return {
        "count": len(items),
        "items": [p.model_dump(mode="json") for p in items],
        "source": {"tier": load.tier, "source": load.source} if load else None,
    }


@router.get("/api/green-spaces")
async def get_filtered() -> dict:
    session = await loaded_session()
    return _catalog_payload(session, session.catalog.get_filtered())


@router.get("/api/green-spaces/all")
async def get_all() -> dict:
    session = await loaded_session()
    return _catalog_payload(session, session.catalog.get_all())


@router.post("/api/green-spaces/search")
async def post_search(spec: FilterSpec) -> dict:
    """Filter the catalog; an unresolved address is reported, not raised."""
    session = await loaded_session()
    result = await session.apply_filters(spec)
    payload = result.model_dump(mode="json")
    payload["count"] = len(result.items)
    payload["address_not_found"] = result.address_not_found
    payload["message"] = filter_summary(result)
    return payload


@router.post("/api/green-spaces/reset")
async def post_reset() -> dict:
    session = await loaded_session()
    session.reset_filters()
    return {"count": len(session.catalog.get_filtered()), "message": "Filters have been reset."}


@router.get("/api/green-spaces/{poi_id}")
async def get_details(poi_id: str) -> dict:
    session = await loaded_session()
    details = await session.details(poi_id)
    if details is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "NOT_FOUND", "message": f"Unknown green space '{poi_id}'"},
        )
    return details.model_dump(mode="json")


@router.put("/api/location")
async def put_location(location: GeoPoint) -> dict:
    session = await loaded_session()
    session.set_user_location(location)
    return {"location": location.model_dump()}


@router.delete("/api/location")
async def delete_location() -> dict:
    session = await loaded_session()
    session.set_user_location(None)
    return {"location": None}


@router.get("/api/nearest")
async def get_nearest(lat: float | None = None, lng: float | None = None, mode: str | None = None) -> dict:
    session = await loaded_session()
    if (lat is None) != (lng is None):
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": "lat and lng must be given together"},
        )
    origin = GeoPoint(lat=lat, lng=lng) if lat is not None and lng is not None else None
    try:
        result = session.find_nearest(origin, mode=mode)
    except LookupError as e:
        raise HTTPException(
            status_code=409,
            detail={"code": "LOCATION_UNAVAILABLE", "message": str(e)},
        ) from e
    if result is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "NO_GREEN_SPACES", "message": nearest_summary(None)},
        )
    return {**result.model_dump(mode="json"), "message": nearest_summary(result)}


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Settings a front end needs to render the map (API keys redacted)."""
    settings = get_settings()
    payload = settings.model_dump(mode="json")
    payload.get("weather", {}).pop("api_key", None)
    payload.pop("data", None)
    # JSON has no Infinity; an open upper bound is sent as null.
    for size_range in payload.get("size_categories", {}).values():
        max_ha = size_range.get("max")
        if max_ha is None or (isinstance(max_ha, float) and math.isinf(max_ha)):
            size_range["max"] = None
    return payload
