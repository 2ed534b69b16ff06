"""
Data sources for the green space catalog.

Every source implements `acquire_all()` and either returns a complete collection or raises
`DataAcquisitionError`; none of them ever returns a partial list.

`TieredDataSource` chains them into the fail-open policy the catalog relies on:

    primary (local export) -> fallback (remote endpoint) -> default (bundled sample)

Each tier is an explicit branch with its own log line, and the returned `LoadResult` says which
tier produced the data so callers and tests can tell a degraded load from a normal one.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from gruenfinder.catalog.loader import load_points, load_sample_points, parse_points
from gruenfinder.config.settings import Settings
from gruenfinder.core.env import resolve_project_path
from gruenfinder.core.http import get_json
from gruenfinder.domain.models import LoadResult, PointOfInterest

logger = logging.getLogger(__name__)


class DataAcquisitionError(Exception):
    """A data source could not produce a complete collection."""


class DataSource(Protocol):
    @property
    def description(self) -> str: ...

    async def acquire_all(self) -> list[PointOfInterest]: ...


class JsonFileDataSource:
    """Reads a local JSON export."""

    def __init__(self, path: str | Path):
        self._path = resolve_project_path(path)

    @property
    def description(self) -> str:
        return f"file:{self._path}"

    async def acquire_all(self) -> list[PointOfInterest]:
        if not self._path.is_file():
            raise DataAcquisitionError(f"Catalog file not found: {self._path}")
        try:
            return load_points(self._path)
        except (OSError, ValueError) as exc:
            raise DataAcquisitionError(f"Could not read catalog file {self._path}: {exc}") from exc


class RemoteJsonDataSource:
    """Fetches the same record layout from an HTTP endpoint."""

    def __init__(self, url: str, *, timeout_seconds: float = 10):
        self._url = url
        self._timeout_seconds = timeout_seconds

    @property
    def description(self) -> str:
        return f"url:{self._url}"

    async def acquire_all(self) -> list[PointOfInterest]:
        try:
            payload = await get_json(self._url, timeout_seconds=self._timeout_seconds)
            return parse_points(payload)
        except Exception as exc:
            raise DataAcquisitionError(f"Could not fetch catalog from {self._url}: {exc}") from exc


class SampleDataSource:
    """The bundled Berlin sample; the default tier."""

    @property
    def description(self) -> str:
        return "bundled-sample"

    async def acquire_all(self) -> list[PointOfInterest]:
        return load_sample_points()


class TieredDataSource:
    """Try `primary`, then `fallback`, then the bundled default collection."""

    def __init__(
        self,
        primary: DataSource | None = None,
        fallback: DataSource | None = None,
        default: DataSource | None = None,
    ):
        self._primary = primary
        self._fallback = fallback
        self._default = default or SampleDataSource()

    @classmethod
    def from_settings(cls, settings: Settings) -> "TieredDataSource":
        primary = JsonFileDataSource(settings.data.path) if settings.data.path else None
        fallback = (
            RemoteJsonDataSource(settings.data.url, timeout_seconds=settings.app.http_timeout_seconds)
            if settings.data.url
            else None
        )
        return cls(primary=primary, fallback=fallback)

    async def acquire(self) -> LoadResult:
        if self._primary is not None:
            try:
                items = await self._primary.acquire_all()
                logger.info("Loaded %d green spaces from %s", len(items), self._primary.description)
                return LoadResult(items=items, tier="primary", source=self._primary.description)
            except DataAcquisitionError as exc:
                logger.warning("Primary green space source failed: %s", exc)

        if self._fallback is not None:
            try:
                items = await self._fallback.acquire_all()
                logger.info("Loaded %d green spaces from fallback %s", len(items), self._fallback.description)
                return LoadResult(items=items, tier="fallback", source=self._fallback.description)
            except DataAcquisitionError as exc:
                logger.warning("Fallback green space source failed: %s", exc)

        items = await self._default.acquire_all()
        logger.info("Using default green space data (%d records)", len(items))
        return LoadResult(items=items, tier="default", source=self._default.description)
