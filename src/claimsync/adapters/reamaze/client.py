"""Re:amaze API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from claimsync.adapters.http_resilience import ResilientClient

from .schema import ReamazeConversation, ReamazeConversationsPage

if TYPE_CHECKING:
    from collections.abc import Callable

    from claimsync.config import ReamazeConfig, ResilienceConfig

log = getLogger(__name__)

DEFAULT_MAX_PAGES = 5


class ReamazeAPIError(RuntimeError):
    """Raised when the Re:amaze API cannot be reached or answers unexpectedly."""


class ReamazeClient:
    """Low-level HTTP client for Re:amaze conversations."""

    def __init__(
        self,
        *,
        config: ReamazeConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._max_pages = max_pages

    def fetch_conversations(self, *, email: str) -> list[ReamazeConversation]:
        """All conversations the customer with ``email`` took part in."""

        return asyncio.run(self._fetch_conversations_async(email=email))

    async def _fetch_conversations_async(self, *, email: str) -> list[ReamazeConversation]:
        conversations: list[ReamazeConversation] = []
        async with self._client_factory(self._resilience) as client:
            page = 1
            while True:
                result = await self._fetch_page(client, email=email, page=page)
                conversations.extend(result.conversations)
                if page >= min(result.page_count, self._max_pages):
                    break
                page += 1
        log.debug("Fetched %d Re:amaze conversations for %s", len(conversations), email)
        return conversations

    async def _fetch_page(
        self,
        client: ResilientClient,
        *,
        email: str,
        page: int,
    ) -> ReamazeConversationsPage:
        try:
            response = await client.get(
                "conversations",
                params={"q": email, "page": str(page)},
                auth=(self._config.login, self._config.api_token),
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ReamazeAPIError(f"Re:amaze request failed: {exc}") from exc

        try:
            payload = response.json()
            page_model = ReamazeConversationsPage.model_validate(payload)
        except ValueError as exc:
            raise ReamazeAPIError(f"Unexpected Re:amaze response payload: {exc}") from exc
        return page_model
