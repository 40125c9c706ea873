"""Translate Re:amaze conversations into support statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from claimsync.domain.risk import aggregate_support_stats

if TYPE_CHECKING:
    from collections.abc import Iterable

    from claimsync.domain.model import SupportStats

    from .schema import ReamazeConversation

# Re:amaze reports numeric statuses; 0 is unresolved, 1 pending, 2 resolved
_STATUS_BY_CODE: dict[int, str] = {
    0: "open",
    1: "pending",
    2: "resolved",
    3: "spam",
    4: "archived",
    5: "on_hold",
    6: "auto_resolved",
    7: "chatbot_assigned",
    8: "chatbot_resolved",
    9: "closed",
}

_CLOSED_ALIASES: dict[str, str] = {
    "auto_resolved": "resolved",
    "chatbot_resolved": "resolved",
    "archived": "closed",
    "spam": "closed",
}


def conversation_status(conversation: ReamazeConversation) -> str:
    status = conversation.status
    if isinstance(status, int):
        label = _STATUS_BY_CODE.get(status, "open")
    else:
        label = (status or "open").strip().lower()
    return _CLOSED_ALIASES.get(label, label)


def translate_conversation(conversation: ReamazeConversation) -> dict[str, Any]:
    resolution_hours: float | None = None
    if conversation.resolved_at is not None:
        elapsed = conversation.resolved_at - conversation.created_at
        resolution_hours = round(elapsed.total_seconds() / 3600, 1)
    return {
        "status": conversation_status(conversation),
        "resolution_hours": resolution_hours,
        "satisfaction": conversation.satisfaction_score,
    }


def translate_conversations(conversations: Iterable[ReamazeConversation]) -> SupportStats | None:
    return aggregate_support_stats(
        translate_conversation(conversation) for conversation in conversations
    )
