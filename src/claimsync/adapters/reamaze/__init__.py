"""Re:amaze support-desk adapter."""

from __future__ import annotations

from .client import ReamazeAPIError, ReamazeClient
from .fetcher import ReamazeSupportSource
from .schema import ReamazeConversation, ReamazeConversationsPage, ReamazeCustomer
from .translator import conversation_status, translate_conversation, translate_conversations

__all__ = [
    "ReamazeAPIError",
    "ReamazeClient",
    "ReamazeConversation",
    "ReamazeConversationsPage",
    "ReamazeCustomer",
    "ReamazeSupportSource",
    "conversation_status",
    "translate_conversation",
    "translate_conversations",
]
