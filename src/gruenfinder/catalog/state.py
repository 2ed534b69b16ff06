"""
In-memory catalog state.

`all` is set once per load and never mutated afterwards; `filtered` is replaced wholesale by each
filter pass (copy-then-swap), so readers always see a fully formed sequence. Both are exposed as
tuples so callers cannot change catalog state through the returned value.
"""

from __future__ import annotations

from typing import Protocol

from gruenfinder.catalog.loader import ensure_unique_ids
from gruenfinder.domain.models import LoadResult, PoiId, PointOfInterest


class CatalogSource(Protocol):
    async def acquire(self) -> LoadResult: ...


class Catalog:
    def __init__(self) -> None:
        self._all: tuple[PointOfInterest, ...] = ()
        self._filtered: tuple[PointOfInterest, ...] = ()
        self._by_id: dict[str, PointOfInterest] = {}
        self._last_load: LoadResult | None = None

    @property
    def loaded(self) -> bool:
        return self._last_load is not None

    @property
    def last_load(self) -> LoadResult | None:
        return self._last_load

    async def load(self, source: CatalogSource) -> LoadResult:
        """Acquire one complete collection and make it both `all` and `filtered`."""
        result = await source.acquire()
        self.replace_all(result.items, load_result=result)
        return result

    def replace_all(
        self,
        items: list[PointOfInterest] | tuple[PointOfInterest, ...],
        *,
        load_result: LoadResult | None = None,
    ) -> None:
        """Install a collection directly (used by `load` and by fixtures)."""
        items = tuple(items)
        ensure_unique_ids(list(items))
        by_id = {str(p.id): p for p in items}
        self._all, self._filtered, self._by_id = items, items, by_id
        self._last_load = load_result or LoadResult(items=list(items), tier="primary", source="in-memory")

    def get_all(self) -> tuple[PointOfInterest, ...]:
        return self._all

    def get_filtered(self) -> tuple[PointOfInterest, ...]:
        return self._filtered

    def get_by_id(self, poi_id: PoiId) -> PointOfInterest | None:
        return self._by_id.get(str(poi_id))

    def commit_filtered(self, items: list[PointOfInterest] | tuple[PointOfInterest, ...]) -> None:
        self._filtered = tuple(items)

    def reset_filtered(self) -> None:
        self._filtered = self._all

    def __len__(self) -> int:
        return len(self._all)
