from __future__ import annotations

import pytest
from django.test import Client

from route_optimizer.services.capabilities import resolve_capabilities
from route_optimizer.services.safety import sensitive_env_values


@pytest.fixture(autouse=True)
def isolated_provider_settings(settings):
    settings.KAKAO_REST_API_KEY = None
    settings.ODSAY_API_KEY = None
    resolve_capabilities.cache_clear()
    sensitive_env_values.cache_clear()
    yield settings
    resolve_capabilities.cache_clear()
    sensitive_env_values.cache_clear()


@pytest.fixture
def api_client() -> Client:
    return Client()
