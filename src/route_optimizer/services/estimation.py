from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import httpx

from route_optimizer.exceptions import ProviderError
from route_optimizer.services.capabilities import ProviderCapabilities
from route_optimizer.services.geo import fallback_estimate
from route_optimizer.services.providers import (
    KakaoDirectionsClient,
    OdsayTransitClient,
    ProviderClient,
)
from route_optimizer.services.safety import normalize_route_warning
from route_optimizer.services.types import Point, ProviderId, RawEstimate, TransportMode

logger = logging.getLogger(__name__)

PROVIDER_PRIORITY: dict[str, tuple[ProviderId, ...]] = {
    "transit": ("odsay", "kakao"),
    "driving": ("kakao", "odsay"),
    "walking": ("kakao", "odsay"),
}

ClientFactory = Callable[[str], ProviderClient]

DEFAULT_CLIENT_FACTORIES: dict[ProviderId, ClientFactory] = {
    "kakao": KakaoDirectionsClient,
    "odsay": OdsayTransitClient,
}


def provider_attempts(
    mode: TransportMode, capabilities: ProviderCapabilities
) -> list[ProviderId]:
    priority = PROVIDER_PRIORITY.get(mode, PROVIDER_PRIORITY["driving"])
    return [provider for provider in priority if capabilities.has(provider)]


class SegmentEstimator:
    """Estimates one directed segment by walking the provider chain for a mode."""

    def __init__(self, client_factories: dict[ProviderId, ClientFactory] | None = None) -> None:
        self.client_factories = client_factories or DEFAULT_CLIENT_FACTORIES

    async def estimate(
        self,
        start: Point,
        finish: Point,
        mode: TransportMode,
        capabilities: ProviderCapabilities,
    ) -> tuple[RawEstimate, list[str]]:
        warnings: list[str] = []

        for provider in provider_attempts(mode, capabilities):
            api_key = capabilities.key_for(provider)
            factory = self.client_factories.get(provider)
            if not api_key or factory is None:
                continue

            client = factory(api_key)
            try:
                return await self._run_attempt(client, start, finish), warnings
            except ProviderError as exc:
                warning = normalize_route_warning(
                    f"{provider.upper()} estimate failed for {_label(start)} -> "
                    f"{_label(finish)} ({exc}).",
                    fallback=f"{provider.upper()} estimate failed.",
                    extra_secrets=capabilities.secrets,
                )
                logger.warning("Provider attempt failed: %s", warning)
                warnings.append(warning)

        logger.info(
            "Using fallback estimate for %s -> %s (%s)", _label(start), _label(finish), mode
        )
        return fallback_estimate(start, finish, mode), warnings

    @staticmethod
    async def _run_attempt(client: ProviderClient, start: Point, finish: Point) -> RawEstimate:
        try:
            return await asyncio.wait_for(
                client.estimate(start, finish),
                timeout=client.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderError(
                client.provider, f"timed out after {int(client.timeout * 1000)} ms"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(client.provider, str(exc) or type(exc).__name__) from exc


def _label(point: Point) -> str:
    return point.name or "point"
