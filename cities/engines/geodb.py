from __future__ import annotations

from collections.abc import Sequence
from typing import Any, cast

import httpx
from django.conf import settings

from ..errors import LocationNotFound, UpstreamError
from .base import LocationLookup
from .types import CityLocation, CitySuggestion


class GeoDbLocationLookup(LocationLookup):
    """GeoDB Cities implementation (RapidAPI).

    Uses `/cities` for prefix search and `/cities/{id}` for details.
    """

    name = "geodb"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        host: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url: str = base_url or cast(
            str,
            getattr(
                settings,
                "GEODB_BASE_URL",
                "https://wft-geo-db.p.rapidapi.com/v1/geo",
            ),
        )
        self.api_key = api_key or getattr(settings, "GEODB_RAPIDAPI_KEY", "")
        self.host = host or getattr(
            settings, "GEODB_RAPIDAPI_HOST", "wft-geo-db.p.rapidapi.com"
        )
        self.timeout = timeout or float(
            getattr(settings, "CITYSCORE_HTTP_TIMEOUT_S", 10.0)
        )

    async def resolve(self, city_id: int) -> CityLocation:
        try:
            payload = await self._request(f"/cities/{city_id}")
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code in (400, 404):
                raise LocationNotFound(city_id, source=self.name) from exc
            raise UpstreamError(
                f"GeoDB returned {exc.response.status_code}",
                source=self.name,
            ) from exc

        city = payload.get("data")
        if not isinstance(city, dict) or not city:
            raise LocationNotFound(city_id, source=self.name)
        return self._parse_location(city)

    async def search(
        self, query: str, limit: int
    ) -> tuple[Sequence[CitySuggestion], int]:
        params = {
            "namePrefix": query,
            "limit": limit,
            "sort": "-population",
        }
        try:
            payload = await self._request("/cities", params)
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                f"GeoDB returned {exc.response.status_code}",
                source=self.name,
            ) from exc

        rows = payload.get("data") or []
        suggestions: list[CitySuggestion] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                suggestions.append(
                    CitySuggestion(
                        id=int(row["id"]),
                        name=str(row["name"]),
                        country=str(row.get("country") or ""),
                        region=row.get("region"),
                        latitude=float(row["latitude"]),
                        longitude=float(row["longitude"]),
                        population=int(row.get("population") or 0),
                    )
                )
            except (KeyError, TypeError, ValueError):
                continue

        metadata = payload.get("metadata")
        total = (
            metadata.get("totalCount") if isinstance(metadata, dict) else None
        )
        if total is None:
            return suggestions, len(suggestions)
        return suggestions, int(total)

    async def _request(
        self, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        headers = {
            "X-RapidAPI-Key": self.api_key,
            "X-RapidAPI-Host": self.host,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}{path}", params=params, headers=headers
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(str(exc), source=self.name) from exc
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "GeoDB returned invalid JSON", source=self.name
            ) from exc
        if not isinstance(data, dict):
            raise UpstreamError(
                "Unexpected GeoDB response shape", source=self.name
            )
        return data

    def _parse_location(self, city: dict[str, Any]) -> CityLocation:
        try:
            return CityLocation(
                id=int(city["id"]),
                name=str(city["name"]),
                country=str(city.get("country") or ""),
                region=city.get("region"),
                latitude=float(city["latitude"]),
                longitude=float(city["longitude"]),
                population=int(city.get("population") or 0),
                population_density=self._to_float(
                    city.get("populationDensity")
                ),
                timezone=city.get("timezone"),
                raw=city,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamError(
                "Incomplete GeoDB city payload", source=self.name
            ) from exc

    def _to_float(self, value: Any) -> float | None:
        try:
            if value is None:
                return None
            return float(value)
        except (TypeError, ValueError):
            return None
