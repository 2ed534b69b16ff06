import math

import pytest

from gruenfinder.catalog.loader import load_sample_points
from gruenfinder.core.geo import distance_m
from gruenfinder.domain.models import FilterSpec, GeoPoint
from gruenfinder.ingestion.geocoding import StaticResolver
from gruenfinder.search.engine import filter_points, find_nearest, matches_size, passes_filters, size_category

from conftest import catalog_of, make_poi


def _ids(items):
    return [p.id for p in items]


def test_size_category_boundaries_are_half_open():
    assert size_category(0.0) == "small"
    assert size_category(0.999) == "small"
    assert size_category(1.0) == "medium"
    assert size_category(9.99) == "medium"
    assert size_category(10.0) == "large"
    assert size_category(3000) == "large"


def test_matches_size_semantics():
    assert matches_size(1.0, ["medium"])
    assert not matches_size(1.0, ["small"])
    assert matches_size(0.999, ["small"])
    assert matches_size(50, ["small", "large"])
    assert matches_size(50, [])


def test_facilities_require_all_tags():
    spec = FilterSpec(required_facilities={"playground", "water"})
    only_playground = make_poi(1, 52.5, 13.4, facilities=["playground"])
    everything = make_poi(2, 52.5, 13.4, facilities=["playground", "water", "bbq"])

    assert not passes_filters(only_playground, spec, user_location=None)
    assert passes_filters(everything, spec, user_location=None)


def test_accessibility_requires_all_tags():
    spec = FilterSpec(required_accessibility={"wheelchair", "parking"})
    partial = make_poi(1, 52.5, 13.4, accessibility=["wheelchair"])
    full = make_poi(2, 52.5, 13.4, accessibility=["parking", "wheelchair", "public_transport"])

    assert not passes_filters(partial, spec, user_location=None)
    assert passes_filters(full, spec, user_location=None)


def test_unknown_tags_never_match():
    spec = FilterSpec(required_facilities={"helipad"})
    assert not passes_filters(make_poi(1, 52.5, 13.4, facilities=["water"]), spec, user_location=None)


@pytest.mark.asyncio
async def test_distance_filter_is_inert_without_user_location():
    catalog = catalog_of(
        make_poi("near", 52.5200, 13.4050),
        make_poi("far", 52.4000, 13.1000),
    )
    result = await filter_points(catalog, FilterSpec(max_distance_m=500), user_location=None)
    assert _ids(result.items) == ["near", "far"]


@pytest.mark.asyncio
async def test_distance_filter_applies_with_user_location():
    catalog = catalog_of(
        make_poi("near", 52.5201, 13.4051),
        make_poi("far", 52.4000, 13.1000),
    )
    result = await filter_points(
        catalog,
        FilterSpec(max_distance_m=500),
        user_location=GeoPoint(lat=52.5200, lng=13.4050),
    )
    assert _ids(result.items) == ["near"]


@pytest.mark.asyncio
async def test_distance_filter_boundary_is_inclusive():
    user = GeoPoint(lat=52.5200, lng=13.4050)
    edge = make_poi("edge", 52.5163, 13.3777)
    exact = distance_m(user.lat, user.lng, edge.anchor.lat, edge.anchor.lng)
    catalog = catalog_of(edge)

    at_limit = await filter_points(catalog, FilterSpec(max_distance_m=exact), user_location=user)
    just_below = await filter_points(
        catalog, FilterSpec(max_distance_m=math.nextafter(exact, 0.0)), user_location=user
    )

    assert _ids(at_limit.items) == ["edge"]
    assert just_below.items == []


@pytest.mark.asyncio
async def test_distance_filter_is_inert_without_max_distance():
    catalog = catalog_of(make_poi("a", 52.52, 13.40), make_poi("b", 48.13, 11.58))
    result = await filter_points(catalog, FilterSpec(), user_location=GeoPoint(lat=52.52, lng=13.40))
    assert _ids(result.items) == ["a", "b"]


@pytest.mark.asyncio
async def test_filter_groups_are_combined_with_and():
    catalog = catalog_of(
        make_poi(1, 52.52, 13.40, size_ha=0.5, facilities=["water"]),
        make_poi(2, 52.52, 13.40, size_ha=5, facilities=["water"]),
        make_poi(3, 52.52, 13.40, size_ha=50, facilities=["water"], accessibility=["wheelchair"]),
        make_poi(4, 52.52, 13.40, size_ha=50, facilities=["bbq"], accessibility=["wheelchair"]),
    )
    spec = FilterSpec(
        size_categories={"small", "large"},
        required_facilities={"water"},
        required_accessibility={"wheelchair"},
    )
    result = await filter_points(catalog, spec)
    assert _ids(result.items) == [3]


@pytest.mark.asyncio
async def test_sample_catalog_facility_filter():
    catalog = catalog_of(*load_sample_points())
    result = await filter_points(catalog, FilterSpec(required_facilities={"playground", "water"}))
    assert _ids(result.items) == [1, 2, 3, 8]
    assert result.address_resolved is None
    assert result.search_anchor is None


@pytest.mark.asyncio
async def test_resolved_search_sorts_by_distance_with_stable_ties():
    anchor = GeoPoint(lat=52.5200, lng=13.4050)
    catalog = catalog_of(
        make_poi("far", 52.5400, 13.4050),
        make_poi("tie-1", 52.5300, 13.4050),
        make_poi("near", 52.5210, 13.4050),
        make_poi("tie-2", 52.5300, 13.4050),
    )
    resolver = StaticResolver({"Alexanderplatz": anchor})

    result = await filter_points(catalog, FilterSpec(search_text="alexanderplatz"), resolve_address=resolver.resolve)

    assert result.address_resolved is True
    assert result.search_anchor == anchor
    assert _ids(result.items) == ["near", "tie-1", "tie-2", "far"]
    distances = [result.distances_to_search[str(p.id)] for p in result.items]
    assert distances == sorted(distances)


@pytest.mark.asyncio
async def test_unresolved_address_is_not_fatal():
    catalog = catalog_of(
        make_poi(1, 52.52, 13.40, facilities=["water"]),
        make_poi(2, 52.53, 13.41, facilities=["bbq"]),
        make_poi(3, 52.50, 13.39, facilities=["water", "bbq"]),
    )

    async def resolve(_text):
        return None

    spec = FilterSpec(search_text="Nowhere Street 99", required_facilities={"water"})
    result = await filter_points(catalog, spec, resolve_address=resolve)

    assert result.address_resolved is False
    assert result.address_not_found
    assert result.search_anchor is None
    assert _ids(result.items) == [1, 3]


@pytest.mark.asyncio
async def test_resolver_errors_are_swallowed():
    catalog = catalog_of(make_poi(1, 52.52, 13.40), make_poi(2, 52.53, 13.41))

    async def broken(_text):
        raise RuntimeError("geocoder down")

    result = await filter_points(catalog, FilterSpec(search_text="Tiergarten"), resolve_address=broken)
    assert result.address_not_found
    assert _ids(result.items) == [1, 2]


@pytest.mark.asyncio
async def test_search_text_without_resolver_reports_not_resolved():
    catalog = catalog_of(make_poi(1, 52.52, 13.40))
    result = await filter_points(catalog, FilterSpec(search_text="Mitte"))
    assert result.address_resolved is False
    assert _ids(result.items) == [1]


@pytest.mark.asyncio
async def test_filter_does_not_touch_catalog_state():
    catalog = catalog_of(make_poi(1, 52.52, 13.40, size_ha=0.5), make_poi(2, 52.53, 13.41, size_ha=20))
    before = catalog.get_filtered()

    result = await filter_points(catalog, FilterSpec(size_categories={"large"}))

    assert _ids(result.items) == [2]
    assert catalog.get_filtered() == before


@pytest.mark.asyncio
async def test_filter_rejects_non_spec_input():
    catalog = catalog_of(make_poi(1, 52.52, 13.40))
    with pytest.raises(TypeError):
        await filter_points(catalog, {"search_text": ""})


@pytest.mark.asyncio
async def test_reset_then_unconstrained_filter_equals_all():
    catalog = catalog_of(*load_sample_points())
    narrowed = await filter_points(catalog, FilterSpec(size_categories={"medium"}))
    catalog.commit_filtered(narrowed.items)
    assert len(catalog.get_filtered()) == 1

    catalog.reset_filtered()
    result = await filter_points(catalog, FilterSpec())
    assert result.items == list(catalog.get_all())


def test_find_nearest_first_encountered_wins_ties():
    # From (52.5, 13.4): A ~100 m north, B and C at the same spot ~50 m east.
    origin_lat, origin_lng = 52.5, 13.4
    catalog = catalog_of(
        make_poi("A", origin_lat + 0.0009, origin_lng),
        make_poi("B", origin_lat, origin_lng + 0.000738),
        make_poi("C", origin_lat, origin_lng + 0.000738),
    )

    result = find_nearest(catalog, origin_lat, origin_lng)

    assert result is not None
    assert result.poi.id == "B"
    assert result.distance_m == pytest.approx(50, abs=1)


def test_find_nearest_scans_all_not_filtered():
    near = make_poi("near", 52.5201, 13.4050, size_ha=0.5)
    far = make_poi("far", 52.6, 13.5, size_ha=50)
    catalog = catalog_of(near, far)
    catalog.commit_filtered([far])

    result = find_nearest(catalog, 52.52, 13.405)
    assert result.poi.id == "near"


def test_find_nearest_includes_travel_time():
    catalog = catalog_of(make_poi(1, 52.5272, 13.4050))  # ~800 m north
    result = find_nearest(catalog, 52.52, 13.405)
    assert result.travel_time.mode == "walking"
    assert result.travel_time.label == "10 minutes"

    cycling = find_nearest(catalog, 52.52, 13.405, mode="cycling")
    assert cycling.travel_time.label == "3 minutes"


def test_find_nearest_on_empty_catalog():
    assert find_nearest(catalog_of(), 52.52, 13.405) is None


def test_find_nearest_on_sample_data():
    catalog = catalog_of(*load_sample_points())
    # Standing at the Tiergarten anchor vertex.
    result = find_nearest(catalog, 52.5145, 13.3465)
    assert result.poi.name == "Tiergarten"
    assert result.distance_m == 0
    assert result.travel_time.label == "less than a minute"
