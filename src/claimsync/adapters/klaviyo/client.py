"""Klaviyo API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from claimsync.adapters.http_resilience import ResilientClient

from .schema import KlaviyoProfile, KlaviyoProfilesResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from claimsync.config import KlaviyoConfig, ResilienceConfig

log = getLogger(__name__)


class KlaviyoAPIError(RuntimeError):
    """Raised when the Klaviyo API cannot be reached or answers unexpectedly."""


class KlaviyoClient:
    """Low-level HTTP client for Klaviyo profiles."""

    def __init__(
        self,
        *,
        config: KlaviyoConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_profile(self, *, email: str) -> KlaviyoProfile | None:
        """The first profile registered for ``email``, or ``None``."""

        return asyncio.run(self._fetch_profile_async(email=email))

    async def _fetch_profile_async(self, *, email: str) -> KlaviyoProfile | None:
        escaped = email.replace('"', '\\"')
        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.get(
                    "profiles/",
                    params={"filter": f'equals(email,"{escaped}")', "page[size]": "1"},
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise KlaviyoAPIError(f"Klaviyo request failed: {exc}") from exc

        try:
            result = KlaviyoProfilesResponse.model_validate(response.json())
        except ValueError as exc:
            raise KlaviyoAPIError(f"Unexpected Klaviyo response payload: {exc}") from exc
        if not result.data:
            log.debug("No Klaviyo profile for %s", email)
            return None
        return result.data[0]
