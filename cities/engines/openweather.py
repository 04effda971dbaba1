from __future__ import annotations

from typing import Any, cast

import httpx
from django.conf import settings

from ..errors import UpstreamError
from .base import WeatherLookup
from .types import WeatherReading


class OpenWeatherLookup(WeatherLookup):
    """OpenWeatherMap current-weather implementation.

    Requests metric units; visibility is reported in kilometres.
    """

    name = "openweather"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url: str = base_url or cast(
            str,
            getattr(
                settings,
                "OPENWEATHER_BASE_URL",
                "https://api.openweathermap.org/data/2.5/weather",
            ),
        )
        self.api_key = api_key or getattr(settings, "OPENWEATHER_API_KEY", "")
        self.timeout = timeout or float(
            getattr(settings, "CITYSCORE_HTTP_TIMEOUT_S", 10.0)
        )

    async def fetch(self, latitude: float, longitude: float) -> WeatherReading:
        payload = await self._request(
            {
                "lat": latitude,
                "lon": longitude,
                "appid": self.api_key,
                "units": "metric",
            }
        )
        main = payload.get("main")
        if not isinstance(main, dict):
            raise UpstreamError(
                "OpenWeatherMap response has no 'main' block",
                source=self.name,
            )
        wind = payload.get("wind") or {}
        conditions = payload.get("weather") or []
        description = icon = None
        if conditions and isinstance(conditions[0], dict):
            description = conditions[0].get("description") or None
            icon = conditions[0].get("icon") or None

        visibility_m = self._to_float(payload.get("visibility"))
        return WeatherReading(
            temperature=self._to_float(main.get("temp")),
            humidity=self._to_float(main.get("humidity")),
            pressure=self._to_float(main.get("pressure")),
            visibility=(
                visibility_m / 1000 if visibility_m is not None else None
            ),
            wind_speed=(
                self._to_float(wind.get("speed"))
                if isinstance(wind, dict)
                else None
            ),
            description=description,
            icon=icon,
            location_name=payload.get("name") or None,
            raw=payload,
        )

    async def _request(self, params: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError(str(exc), source=self.name) from exc
        if not isinstance(data, dict):
            raise UpstreamError(
                "Unexpected OpenWeatherMap response shape", source=self.name
            )
        return data

    def _to_float(self, value: Any) -> float | None:
        try:
            if value is None:
                return None
            return float(value)
        except (TypeError, ValueError):
            return None
