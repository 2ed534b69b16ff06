"""
Green space catalog loader.

The catalog is a JSON array of green space records (default: `data/green_spaces.json`), either
in the nested GeoJSON-like export layout (`geometry` + `properties`) or flat. We validate it into
typed Pydantic models so the search engine can assume a consistent shape; a record with a
malformed footprint fails here, once, instead of inside every distance computation.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from gruenfinder.core.env import resolve_project_path
from gruenfinder.domain.models import PointOfInterest


_POIS_ADAPTER = TypeAdapter(list[PointOfInterest])

SAMPLE_DATASET = "sample_green_spaces.json"


def parse_points(payload: Any) -> list[PointOfInterest]:
    """Validate a decoded JSON payload into POIs.

    Accepts a bare list or a GeoJSON-ish `{"features": [...]}` / `{"items": [...]}` wrapper.
    Raises `ValueError` (pydantic.ValidationError) on bad records or duplicate ids.
    """
    if isinstance(payload, dict):
        payload = payload.get("features", payload.get("items"))
    if not isinstance(payload, list):
        raise ValueError("Green space payload must be a JSON array of records")
    points = _POIS_ADAPTER.validate_python(payload)
    ensure_unique_ids(points)
    return points


def ensure_unique_ids(points: list[PointOfInterest]) -> None:
    seen: set[str] = set()
    for p in points:
        key = str(p.id)
        if key in seen:
            raise ValueError(f"Duplicate green space id '{p.id}'")
        seen.add(key)


def load_points(path: str | Path) -> list[PointOfInterest]:
    """Load and validate a green space catalog JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    return parse_points(payload)


def load_sample_points() -> list[PointOfInterest]:
    """Load the bundled Berlin sample dataset (the last-resort default tier)."""
    text = resources.files("gruenfinder.catalog").joinpath(SAMPLE_DATASET).read_text(encoding="utf-8")
    return parse_points(json.loads(text))
