import pytest

from gruenfinder.catalog.state import Catalog
from gruenfinder.config.settings import get_settings
from gruenfinder.domain.models import GeoPoint, PointOfInterest, WeatherReport


def make_poi(
    poi_id,
    lat: float,
    lng: float,
    *,
    size_ha: float = 5.0,
    facilities=(),
    accessibility=(),
    category: str = "park",
) -> PointOfInterest:
    return PointOfInterest.model_validate(
        {
            "id": poi_id,
            "name": f"POI {poi_id}",
            "type": category,
            "geometry": {"type": "Point", "coordinates": [lng, lat]},
            "size_ha": size_ha,
            "facilities": list(facilities),
            "accessibility": list(accessibility),
        }
    )


def catalog_of(*pois: PointOfInterest) -> Catalog:
    catalog = Catalog()
    catalog.replace_all(list(pois))
    return catalog


class StubWeather:
    def __init__(self):
        self.calls: list[tuple[float, float]] = []

    async def get(self, lat: float, lng: float) -> WeatherReport:
        self.calls.append((lat, lng))
        return WeatherReport(temperature_c=18, condition="Clear", icon="fa-sun", source="live")


class NoAddressResolver:
    async def resolve(self, text: str) -> GeoPoint | None:
        return None


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    # Keep tests independent of a developer's .env / config and of any local data export.
    monkeypatch.setenv("GRUENFINDER_PROJECT_ROOT", str(tmp_path))
    for name in [
        "GRUENFINDER_CONFIG_PATH",
        "GRUENFINDER_DATA_PATH",
        "GRUENFINDER_DATA_URL",
        "GRUENFINDER_GEOCODING_USER_AGENT",
        "OPENWEATHERMAP_API_KEY",
    ]:
        monkeypatch.delenv(name, raising=False)
    from gruenfinder.core import env

    env.get_project_root.cache_clear()
    env.load_dotenv_if_present.cache_clear()
    get_settings.cache_clear()
    yield
    env.get_project_root.cache_clear()
    env.load_dotenv_if_present.cache_clear()
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _no_geocoding_pause(monkeypatch):
    # The request spacing is asserted explicitly where it matters; elsewhere it only slows tests.
    async def no_pause(_seconds):
        return None

    monkeypatch.setattr("gruenfinder.ingestion.geocoding._pause", no_pause)
