"""Marketing statistics sourced from Klaviyo."""

from __future__ import annotations

from typing import TYPE_CHECKING

from claimsync.domain.model import Signal, SignalUnavailableError

from .client import KlaviyoAPIError, KlaviyoClient
from .translator import translate_profile

if TYPE_CHECKING:
    from claimsync.config import KlaviyoConfig
    from claimsync.domain.model import MarketingProfile


class KlaviyoMarketingSource:
    """``MarketingProfileSource`` backed by Klaviyo profiles."""

    def __init__(self, *, config: KlaviyoConfig, client: KlaviyoClient | None = None) -> None:
        self._client = client or KlaviyoClient(config=config)

    def __call__(self, email: str) -> MarketingProfile | None:
        try:
            profile = self._client.fetch_profile(email=email)
        except KlaviyoAPIError as exc:
            raise SignalUnavailableError(Signal.MARKETING, str(exc)) from exc
        if profile is None:
            return None
        return translate_profile(profile)
