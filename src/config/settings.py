"""Django settings for the route optimizer project."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent


def first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value
    return None


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-in-production")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = [host for host in os.getenv("DJANGO_ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "route_optimizer",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "config.urls"

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

# Computed routes are never persisted.
DATABASES: dict[str, dict[str, str]] = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "route_optimizer": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}

KAKAO_REST_API_KEY = first_env("KAKAO_REST_API_KEY", "KAKAO_API_KEY", "KAKAO_KEY")
KAKAO_DIRECTIONS_URL = os.getenv(
    "KAKAO_DIRECTIONS_URL", "https://apis-navi.kakaomobility.com/v1/directions"
)
KAKAO_TIMEOUT_SECONDS = float(os.getenv("KAKAO_TIMEOUT_SECONDS", "4.0"))

ODSAY_API_KEY = first_env("ODSAY_API_KEY", "ODSAY_KEY")
ODSAY_TRANSIT_URL = os.getenv(
    "ODSAY_TRANSIT_URL", "https://api.odsay.com/v1/api/searchPubTransPathT"
)
ODSAY_TIMEOUT_SECONDS = float(os.getenv("ODSAY_TIMEOUT_SECONDS", "4.5"))
