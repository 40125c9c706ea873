"""Klaviyo email-marketing adapter."""

from __future__ import annotations

from .client import KlaviyoAPIError, KlaviyoClient
from .fetcher import KlaviyoMarketingSource
from .schema import KlaviyoProfile, KlaviyoProfileProperties, KlaviyoProfilesResponse
from .translator import translate_profile

__all__ = [
    "KlaviyoAPIError",
    "KlaviyoClient",
    "KlaviyoMarketingSource",
    "KlaviyoProfile",
    "KlaviyoProfileProperties",
    "KlaviyoProfilesResponse",
    "translate_profile",
]
