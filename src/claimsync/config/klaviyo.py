"""Klaviyo configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_KLAVIYO_BASE_URL = "https://a.klaviyo.com/api"
KLAVIYO_API_REVISION = "2024-10-15"


@dataclass(frozen=True, slots=True)
class KlaviyoConfig:
    resilience: ResilienceConfig


def get_klaviyo_config() -> KlaviyoConfig:
    values = require_env_vars(("KLAVIYO_API_KEY",))

    resilience = ResilienceConfig(
        name="klaviyo",
        base_url=DEFAULT_KLAVIYO_BASE_URL,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        retry=RetryPolicy(total=4),
        cache=CacheConfig(enabled=True, backend="memory"),
        default_headers={
            "Authorization": f"Klaviyo-API-Key {values['KLAVIYO_API_KEY']}",
            "Accept": "application/json",
            "revision": KLAVIYO_API_REVISION,
        },
    )
    return KlaviyoConfig(resilience=resilience)
