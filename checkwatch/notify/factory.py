"""Convenience factory for wiring notification channels from config."""

from __future__ import annotations

from checkwatch.core.config import NotificationsConfig
from checkwatch.notify.channels import (
    DiscordChannel,
    HttpChannel,
    LoggerChannel,
    NotificationChannel,
    TelegramChannel,
)
from checkwatch.notify.dispatcher import NotificationDispatcher


def create_channels(config: NotificationsConfig) -> list[NotificationChannel]:
    """Instantiate every enabled channel."""
    base_url = config.base_url
    channels: list[NotificationChannel] = []

    if config.http.enabled:
        channels.append(HttpChannel(config.http, base_url=base_url))

    if config.discord.enabled:
        channels.append(DiscordChannel(config.discord, base_url=base_url))

    if config.telegram.enabled:
        channels.append(TelegramChannel(config.telegram, base_url=base_url))

    if config.logger.enabled:
        channels.append(LoggerChannel(base_url=base_url))

    return channels


def create_dispatcher(config: NotificationsConfig) -> NotificationDispatcher:
    return NotificationDispatcher(channels=create_channels(config))
