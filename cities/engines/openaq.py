from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, cast

import httpx
from django.conf import settings

from ..errors import UpstreamError
from .base import AirQualityLookup
from .types import AirQualityReading

POLLUTANTS = ("pm25", "pm10", "no2", "so2", "o3", "co")
MAX_RADIUS_M = 25000


class OpenAqAirQualityLookup(AirQualityLookup):
    """OpenAQ v3 implementation.

    Finds monitoring locations around the coordinates, picks the closest one
    and reads its latest sensor values. Returns None when no location is
    within the search radius.
    """

    name = "openaq"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        radius_m: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url: str = base_url or cast(
            str,
            getattr(settings, "OPENAQ_BASE_URL", "https://api.openaq.org/v3"),
        )
        self.api_key = api_key or getattr(settings, "OPENAQ_API_KEY", "")
        self.radius_m = radius_m or int(
            getattr(settings, "OPENAQ_SEARCH_RADIUS_M", MAX_RADIUS_M)
        )
        self.timeout = timeout or float(
            getattr(settings, "CITYSCORE_HTTP_TIMEOUT_S", 10.0)
        )

    async def fetch(
        self, latitude: float, longitude: float, radius_m: int | None = None
    ) -> AirQualityReading | None:
        radius = min(radius_m or self.radius_m, MAX_RADIUS_M)
        locations = await self._request(
            "/locations",
            {
                "coordinates": f"{latitude},{longitude}",
                "radius": radius,
                "limit": 10,
            },
        )
        results = [
            row
            for row in locations.get("results") or []
            if isinstance(row, dict) and row.get("id") is not None
        ]
        if not results:
            return None

        station = min(results, key=self._distance)
        latest = await self._request(f"/locations/{station['id']}/latest")
        return self._parse_latest(station, latest.get("results") or [])

    async def _request(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        headers = {"X-API-Key": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}{path}", params=params, headers=headers
                )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError(str(exc), source=self.name) from exc
        if not isinstance(data, dict):
            raise UpstreamError(
                "Unexpected OpenAQ response shape", source=self.name
            )
        return data

    def _parse_latest(
        self, station: dict[str, Any], measurements: list[Any]
    ) -> AirQualityReading:
        sensor_parameters = self._sensor_parameters(station)
        values: dict[str, float | None] = dict.fromkeys(POLLUTANTS)
        last_updated: datetime | None = None

        for measurement in measurements:
            if not isinstance(measurement, dict):
                continue
            parameter = self._parameter_name(measurement, sensor_parameters)
            if parameter not in values:
                continue
            value = self._to_float(measurement.get("value"))
            if value is None:
                continue
            values[parameter] = value
            observed = self._parse_datetime(measurement.get("datetime"))
            if observed is not None and (
                last_updated is None or observed > last_updated
            ):
                last_updated = observed

        return AirQualityReading(
            pm25=values["pm25"],
            pm10=values["pm10"],
            no2=values["no2"],
            so2=values["so2"],
            o3=values["o3"],
            co=values["co"],
            last_updated=last_updated,
            source=str(station.get("name") or "OpenAQ"),
            raw={"location": station, "latest": measurements},
        )

    def _sensor_parameters(self, station: dict[str, Any]) -> dict[int, str]:
        mapping: dict[int, str] = {}
        for sensor in station.get("sensors") or []:
            if not isinstance(sensor, dict) or sensor.get("id") is None:
                continue
            parameter = sensor.get("parameter")
            if isinstance(parameter, dict):
                parameter = parameter.get("name")
            if isinstance(parameter, str):
                mapping[int(sensor["id"])] = parameter.lower()
        return mapping

    def _parameter_name(
        self, measurement: dict[str, Any], sensors: dict[int, str]
    ) -> str | None:
        parameter = measurement.get("parameter")
        if isinstance(parameter, dict):
            parameter = parameter.get("name")
        if isinstance(parameter, str):
            return parameter.lower()
        sensor_id = measurement.get("sensorsId")
        if sensor_id is None:
            return None
        try:
            return sensors.get(int(sensor_id))
        except (TypeError, ValueError):
            return None

    def _distance(self, station: dict[str, Any]) -> float:
        distance = self._to_float(station.get("distance"))
        return distance if distance is not None else float("inf")

    def _parse_datetime(self, raw: Any) -> datetime | None:
        if isinstance(raw, dict):
            raw = raw.get("utc")
        if not isinstance(raw, str):
            return None
        candidate = raw
        if candidate.endswith("Z"):
            candidate = candidate.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed

    def _to_float(self, value: Any) -> float | None:
        try:
            if value is None:
                return None
            return float(value)
        except (TypeError, ValueError):
            return None
