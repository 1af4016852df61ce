"""Types for the notification subsystem."""

from __future__ import annotations

from pydantic import BaseModel, Field

from checkwatch.core.types import AlertType, SubscriptionType


class NotificationMessage(BaseModel):
    """Channel-neutral rendering of a check notification."""

    severity: AlertType
    title: str
    body: str = ""
    fields: dict[str, str] = Field(default_factory=dict)
    url: str = ""


class DeliveryResult(BaseModel):
    """Outcome of one (subscription, channel) delivery attempt."""

    subscription_target: str
    subscription_type: SubscriptionType
    channel: str
    ok: bool
    error: str | None = None
