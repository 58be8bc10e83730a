"""Runtime settings for the calculation service client."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping

API_URL_ENV_VAR = 'SIPCALC_API_URL'
DEFAULT_API_BASE_URL = 'http://localhost:3001'

CALCULATE_RETURNS_ENDPOINT = '/calculate-returns'
SCHEMES_ENDPOINT = '/schemes'

# Free-tier deployments can take 15-30s to wake up on the first request.
DEFAULT_REQUEST_TIMEOUT_SECONDS = 60.0
DEFAULT_RATE_LIMIT_CLEAR_SECONDS = 10.0


@dataclass(frozen=True)
class Settings:
    """Values resolved once at startup."""

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    rate_limit_clear_seconds: float = DEFAULT_RATE_LIMIT_CLEAR_SECONDS

    def endpoint_url(self, endpoint: str) -> str:
        return f'{self.api_base_url}{endpoint}'


def resolve_api_base_url(environ: Mapping[str, str] | None = None) -> str:
    """Return the service base URL from the environment, without a trailing slash."""
    env = os.environ if environ is None else environ
    raw = str(env.get(API_URL_ENV_VAR, '') or '').strip()
    if not raw:
        return DEFAULT_API_BASE_URL
    return raw.rstrip('/')


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    return Settings(api_base_url=resolve_api_base_url(environ))
