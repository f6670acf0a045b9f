from __future__ import annotations

from dataclasses import dataclass
from functools import cache

from django.conf import settings

from route_optimizer.services.types import ProviderId


@dataclass(slots=True, frozen=True)
class ProviderCapabilities:
    kakao_api_key: str | None = None
    odsay_api_key: str | None = None

    @property
    def providers(self) -> frozenset[ProviderId]:
        configured: set[ProviderId] = set()
        if self.kakao_api_key:
            configured.add("kakao")
        if self.odsay_api_key:
            configured.add("odsay")
        return frozenset(configured)

    @property
    def secrets(self) -> tuple[str, ...]:
        return tuple(key for key in (self.kakao_api_key, self.odsay_api_key) if key)

    def has(self, provider: ProviderId) -> bool:
        return provider in self.providers

    def key_for(self, provider: ProviderId) -> str | None:
        if provider == "kakao":
            return self.kakao_api_key
        if provider == "odsay":
            return self.odsay_api_key
        return None


@cache
def resolve_capabilities() -> ProviderCapabilities:
    """Read provider credentials once; later calls reuse the first result."""
    return ProviderCapabilities(
        kakao_api_key=_clean_credential(getattr(settings, "KAKAO_REST_API_KEY", None)),
        odsay_api_key=_clean_credential(getattr(settings, "ODSAY_API_KEY", None)),
    )


def _clean_credential(value: object) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None
