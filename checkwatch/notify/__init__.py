"""Notification channels and fan-out."""

from checkwatch.notify.channels import (
    DiscordChannel,
    HttpChannel,
    LoggerChannel,
    NotificationChannel,
    TelegramChannel,
)
from checkwatch.notify.dispatcher import NotificationDispatcher
from checkwatch.notify.exceptions import NotificationError
from checkwatch.notify.factory import create_channels, create_dispatcher
from checkwatch.notify.formatters import format_notification, notification_payload
from checkwatch.notify.types import DeliveryResult, NotificationMessage

__all__ = [
    "DeliveryResult",
    "DiscordChannel",
    "HttpChannel",
    "LoggerChannel",
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationError",
    "NotificationMessage",
    "TelegramChannel",
    "create_channels",
    "create_dispatcher",
    "format_notification",
    "notification_payload",
]
