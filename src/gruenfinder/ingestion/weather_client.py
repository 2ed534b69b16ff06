"""
Weather ingestion client (OpenWeatherMap current weather).

Used by the detail view only. The contract is fail-open: without an API key, or when the call
fails for any reason, callers get the configured default report (tagged `source="default"`)
instead of an exception.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from gruenfinder.config.settings import Settings
from gruenfinder.core.http import get_json
from gruenfinder.domain.models import WeatherReport

logger = logging.getLogger(__name__)


class WeatherProvider(Protocol):
    async def get(self, lat: float, lng: float) -> WeatherReport: ...


class OpenWeatherMapClient:
    def __init__(self, settings: Settings):
        self._settings = settings

    def default_report(self) -> WeatherReport:
        d = self._settings.weather.default
        return WeatherReport(temperature_c=d.temperature_c, condition=d.condition, icon=d.icon, source="default")

    def _icon_for(self, condition: str) -> str:
        cfg = self._settings.weather
        return cfg.condition_icons.get(condition, cfg.fallback_icon)

    def _parse(self, payload: dict[str, Any]) -> WeatherReport:
        condition = str(payload["weather"][0]["main"])
        temperature = round(float(payload["main"]["temp"]))
        return WeatherReport(
            temperature_c=temperature,
            condition=condition,
            icon=self._icon_for(condition),
            source="live",
        )

    async def get(self, lat: float, lng: float) -> WeatherReport:
        cfg = self._settings.weather
        if not cfg.api_key:
            return self.default_report()

        params = {"lat": lat, "lon": lng, "units": "metric", "appid": cfg.api_key}
        try:
            logger.info("Fetching weather for lat=%.4f lng=%.4f", lat, lng)
            payload = await get_json(
                cfg.base_url,
                params=params,
                timeout_seconds=self._settings.app.http_timeout_seconds,
            )
            return self._parse(payload)
        except Exception as exc:
            logger.warning("Weather lookup failed for lat=%.4f lng=%.4f: %s", lat, lng, exc)
            return self.default_report()
