"""Support-ticket statistics sourced from Re:amaze."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from claimsync.domain.model import Signal, SignalUnavailableError

from .client import ReamazeAPIError, ReamazeClient
from .translator import translate_conversations

if TYPE_CHECKING:
    from claimsync.config import ReamazeConfig
    from claimsync.domain.model import SupportStats

log = getLogger(__name__)


class ReamazeSupportSource:
    """``SupportStatsSource`` backed by the Re:amaze conversations API."""

    def __init__(self, *, config: ReamazeConfig, client: ReamazeClient | None = None) -> None:
        self._client = client or ReamazeClient(config=config)

    def __call__(self, email: str) -> SupportStats | None:
        try:
            conversations = self._client.fetch_conversations(email=email)
        except ReamazeAPIError as exc:
            raise SignalUnavailableError(Signal.SUPPORT, str(exc)) from exc
        return translate_conversations(conversations)
