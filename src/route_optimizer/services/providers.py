from __future__ import annotations

import math
from typing import Any

import httpx
from django.conf import settings

from route_optimizer.exceptions import ProviderError
from route_optimizer.services.types import Point, ProviderId, RawEstimate


class ProviderClient:
    provider: ProviderId

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    async def estimate(self, start: Point, finish: Point) -> RawEstimate:
        raise NotImplementedError

    async def _get_json(
        self,
        params: dict[str, str],
        headers: dict[str, str] | None = None,
    ) -> Any:
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.get(self.base_url, params=params, headers=headers)

        if not response.is_success:
            raise ProviderError(self.provider, f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(self.provider, "invalid JSON response") from exc


class KakaoDirectionsClient(ProviderClient):
    """Kakao Mobility car directions; reports meters and seconds."""

    provider: ProviderId = "kakao"

    def __init__(self, api_key: str, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(
            api_key,
            base_url=settings.KAKAO_DIRECTIONS_URL,
            timeout=settings.KAKAO_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def estimate(self, start: Point, finish: Point) -> RawEstimate:
        payload = await self._get_json(
            params={
                "origin": f"{start.lng},{start.lat}",
                "destination": f"{finish.lng},{finish.lat}",
                "priority": "RECOMMEND",
                "alternatives": "false",
                "road_details": "false",
            },
            headers={"Authorization": f"KakaoAK {self.api_key}"},
        )
        return self._parse_response(payload)

    @staticmethod
    def _parse_response(payload: Any) -> RawEstimate:
        summary = _first_item(_field(payload, "routes")).get("summary")
        distance_meters = to_finite_number(_field(summary, "distance"))
        duration_seconds = to_finite_number(_field(summary, "duration"))
        if _missing_or_negative(distance_meters, duration_seconds):
            raise ProviderError("kakao", "Kakao response missing distance/duration")

        return RawEstimate(
            distance_km=round(distance_meters / 1000.0, 2),
            duration_min=round(duration_seconds / 60.0, 1),
            provider="kakao",
        )


class OdsayTransitClient(ProviderClient):
    """ODsay public transit search; reports meters and minutes."""

    provider: ProviderId = "odsay"

    def __init__(self, api_key: str, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(
            api_key,
            base_url=settings.ODSAY_TRANSIT_URL,
            timeout=settings.ODSAY_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def estimate(self, start: Point, finish: Point) -> RawEstimate:
        payload = await self._get_json(
            params={
                "SX": str(start.lng),
                "SY": str(start.lat),
                "EX": str(finish.lng),
                "EY": str(finish.lat),
                "apiKey": self.api_key,
            }
        )
        return self._parse_response(payload)

    @staticmethod
    def _parse_response(payload: Any) -> RawEstimate:
        path = _first_item(_field(_field(payload, "result"), "path"))
        info = path.get("info")
        distance_meters = to_finite_number(_field(info, "totalDistance"))
        duration_minutes = to_finite_number(_field(info, "totalTime"))
        if _missing_or_negative(distance_meters, duration_minutes):
            raise ProviderError("odsay", "ODSAY response missing distance/time")

        return RawEstimate(
            distance_km=round(distance_meters / 1000.0, 2),
            duration_min=round(duration_minutes, 1),
            provider="odsay",
        )


def to_finite_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)) and not (isinstance(value, str) and value.strip()):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _field(payload: Any, name: str) -> Any:
    if isinstance(payload, dict):
        return payload.get(name)
    return None


def _first_item(items: Any) -> dict[str, Any]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


def _missing_or_negative(*values: float | None) -> bool:
    return any(value is None or value < 0 for value in values)
