import pytest

from gruenfinder.core.routing import directions_url
from gruenfinder.domain.models import GeoPoint


def test_directions_url_walking():
    url = directions_url(GeoPoint(lat=52.52, lng=13.405), GeoPoint(lat=52.5145, lng=13.3465))
    assert url == (
        "https://www.google.com/maps/dir/?api=1&origin=52.52,13.405"
        "&destination=52.5145,13.3465&travelmode=walking"
    )


def test_directions_url_maps_engine_modes():
    a, b = GeoPoint(lat=1, lng=2), GeoPoint(lat=3, lng=4)
    assert directions_url(a, b, mode="cycling").endswith("travelmode=bicycling")
    assert directions_url(a, b, mode="public_transport").endswith("travelmode=transit")


def test_directions_url_rejects_unknown_mode():
    with pytest.raises(ValueError):
        directions_url(GeoPoint(lat=1, lng=2), GeoPoint(lat=3, lng=4), mode="teleport")
