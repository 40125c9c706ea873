"""Minimal Pydantic models for the Klaviyo profiles API (JSON:API envelope)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class KlaviyoBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class KlaviyoProfileProperties(KlaviyoBaseModel):
    """Custom profile properties maintained by the storefront integration.

    Rates are fractions in [0, 1]; money is in currency units.
    """

    lifetime_value: float | None = None
    total_orders: int | None = None
    average_order_value: float | None = None
    email_open_rate: float | None = None
    email_click_rate: float | None = None
    average_review_rating: float | None = None
    total_reviews: int | None = None


class KlaviyoProfileAttributes(KlaviyoBaseModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    properties: KlaviyoProfileProperties = Field(default_factory=KlaviyoProfileProperties)


class KlaviyoProfile(KlaviyoBaseModel):
    id: str
    type: str = "profile"
    attributes: KlaviyoProfileAttributes = Field(default_factory=KlaviyoProfileAttributes)


class KlaviyoProfilesResponse(KlaviyoBaseModel):
    data: list[KlaviyoProfile] = Field(default_factory=list["KlaviyoProfile"])
