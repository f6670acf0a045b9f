from __future__ import annotations

import os
import re
from collections.abc import Iterable
from functools import cache

from route_optimizer.exceptions import INSUFFICIENT_POINTS_MESSAGE

REDACTED = "[REDACTED]"
MAX_PUBLIC_MESSAGE_LENGTH = 180
GENERIC_ROUTE_ERROR_MESSAGE = "Failed to optimize route."

SAFE_ROUTE_ERROR_MESSAGES = frozenset({INSUFFICIENT_POINTS_MESSAGE})

SENSITIVE_ENV_KEY_PATTERN = re.compile(r"(key|token|secret|password|passwd|private|auth)", re.I)
AUTH_SCHEME_PATTERN = re.compile(r"\b(Bearer|Basic|KakaoAK)\s+\S+", re.I)
QUERY_SECRET_PATTERN = re.compile(
    r"([?&](?:api[_-]?key|key|token|secret|password)=)[^&\s]+", re.I
)


@cache
def sensitive_env_values() -> tuple[str, ...]:
    values = {
        value.strip()
        for name, value in os.environ.items()
        if SENSITIVE_ENV_KEY_PATTERN.search(name) and len(value.strip()) >= 6
    }
    return tuple(sorted(values, key=len, reverse=True))


def sanitize_public_text(raw: str, extra_secrets: Iterable[str] = ()) -> str:
    """Strip credential-like content from text that may reach a client."""
    normalized = " ".join(raw.split())
    if not normalized:
        return ""

    redacted = AUTH_SCHEME_PATTERN.sub(lambda match: f"{match.group(1)} {REDACTED}", normalized)
    redacted = QUERY_SECRET_PATTERN.sub(rf"\g<1>{REDACTED}", redacted)

    secrets = {secret.strip() for secret in extra_secrets if secret and secret.strip()}
    secrets.update(sensitive_env_values())
    for secret in sorted(secrets, key=len, reverse=True):
        if secret in redacted:
            redacted = redacted.replace(secret, REDACTED)

    return _limit_message(redacted, MAX_PUBLIC_MESSAGE_LENGTH)


def normalize_route_warning(raw: str, fallback: str, extra_secrets: Iterable[str] = ()) -> str:
    return sanitize_public_text(raw, extra_secrets) or fallback


def normalize_route_error_message(error: BaseException) -> str:
    sanitized = sanitize_public_text(str(error))
    if sanitized in SAFE_ROUTE_ERROR_MESSAGES:
        return sanitized
    return GENERIC_ROUTE_ERROR_MESSAGE


def _limit_message(value: str, max_length: int) -> str:
    if len(value) <= max_length:
        return value
    return f"{value[: max_length - 3]}..."
