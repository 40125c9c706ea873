"""Re:amaze support desk configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy


@dataclass(frozen=True, slots=True)
class ReamazeConfig:
    login: str
    api_token: str
    resilience: ResilienceConfig


def get_reamaze_config() -> ReamazeConfig:
    values = require_env_vars(("REAMAZE_BRAND", "REAMAZE_LOGIN", "REAMAZE_API_TOKEN"))
    brand = values["REAMAZE_BRAND"]

    resilience = ResilienceConfig(
        name="reamaze",
        base_url=f"https://{brand}.reamaze.io/api/v1",
        # Re:amaze allows 40 requests per minute per login
        ratelimit=RateLimit(max_calls=40, per_seconds=60.0),
        retry=RetryPolicy(total=3),
        cache=CacheConfig(enabled=True, backend="memory"),
        default_headers={"Accept": "application/json"},
    )
    return ReamazeConfig(
        login=values["REAMAZE_LOGIN"],
        api_token=values["REAMAZE_API_TOKEN"],
        resilience=resilience,
    )
