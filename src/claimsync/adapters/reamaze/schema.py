"""Minimal Pydantic models for the Re:amaze conversations API."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field


class ReamazeBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ReamazeCustomer(ReamazeBaseModel):
    email: str | None = None
    name: str | None = None


class ReamazeConversation(ReamazeBaseModel):
    slug: str | None = None
    subject: str | None = None
    status: str | int | None = None
    category: str | None = None
    created_at: datetime
    resolved_at: datetime | None = None
    last_message_at: datetime | None = None
    messages_count: int = 0
    satisfaction_score: float | None = None
    customer: ReamazeCustomer | None = None


class ReamazeConversationsPage(ReamazeBaseModel):
    conversations: list[ReamazeConversation] = Field(
        default_factory=list["ReamazeConversation"]
    )
    page_count: int = 1
    page_size: int | None = None
    total_count: int | None = None
