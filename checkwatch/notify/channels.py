"""Notification channels — HTTP webhook, Discord, Telegram and log delivery."""

from __future__ import annotations

import abc
from collections.abc import Sequence
from html import escape as html_escape
from typing import Any

import aiohttp
import structlog

from checkwatch.core.config import (
    DiscordConfig,
    HttpChannelConfig,
    TelegramConfig,
)
from checkwatch.core.types import Alert, Check, Subscription, SubscriptionType
from checkwatch.notify.exceptions import NotificationError
from checkwatch.notify.formatters import (
    SEVERITY_COLORS,
    format_notification,
    notification_payload,
)

logger = structlog.get_logger(__name__)


class NotificationChannel(abc.ABC):
    """Base class for alert delivery channels.

    A channel declares which subscription type it serves; the dispatcher
    only calls ``send`` for subscriptions it can handle.
    """

    subscription_type: SubscriptionType

    def __init__(self, base_url: str = "") -> None:
        self._base_url = base_url

    @property
    def name(self) -> str:
        return type(self).__name__

    def can_handle(self, subscription_type: SubscriptionType) -> bool:
        return subscription_type == self.subscription_type

    @abc.abstractmethod
    async def send(
        self,
        check: Check,
        subscription: Subscription,
        alerts: Sequence[Alert],
    ) -> bool:
        """Deliver a notification. Returns True on success."""

    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class _HttpPostChannel(NotificationChannel):
    """Shared aiohttp session handling for channels that POST JSON."""

    _ok_statuses: frozenset[int] = frozenset({200, 201, 202, 204})

    def __init__(self, base_url: str = "", timeout_secs: float = 10.0) -> None:
        super().__init__(base_url)
        self._timeout = aiohttp.ClientTimeout(total=timeout_secs)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _post(self, url: str, payload: dict[str, Any], event: str) -> bool:
        try:
            session = self._get_session()
            async with session.post(url, json=payload) as resp:
                if resp.status in self._ok_statuses:
                    return True
                body = await resp.text()
                logger.warning(
                    f"{event}_send_failed",
                    status=resp.status,
                    body=body[:200],
                )
                return False
        except Exception:
            logger.exception(f"{event}_send_error")
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


class HttpChannel(_HttpPostChannel):
    """POSTs a JSON document describing the check and alerts to the subscription target."""

    subscription_type = SubscriptionType.HTTP

    def __init__(self, config: HttpChannelConfig | None = None, base_url: str = "") -> None:
        cfg = config or HttpChannelConfig()
        super().__init__(base_url=base_url, timeout_secs=cfg.timeout_secs)

    async def send(
        self,
        check: Check,
        subscription: Subscription,
        alerts: Sequence[Alert],
    ) -> bool:
        payload = notification_payload(check, alerts, self._base_url)
        return await self._post(subscription.target, payload, "http")


class DiscordChannel(_HttpPostChannel):
    """Delivers alerts via a Discord webhook with colour-coded embeds."""

    subscription_type = SubscriptionType.DISCORD

    def __init__(self, config: DiscordConfig | None = None, base_url: str = "") -> None:
        cfg = config or DiscordConfig()
        super().__init__(base_url=base_url, timeout_secs=cfg.timeout_secs)

    async def send(
        self,
        check: Check,
        subscription: Subscription,
        alerts: Sequence[Alert],
    ) -> bool:
        msg = format_notification(check, alerts, self._base_url)
        embed: dict[str, Any] = {
            "title": msg.title,
            "color": SEVERITY_COLORS.get(msg.severity, 0x95A5A6),
            "fields": [
                {"name": k, "value": v, "inline": True}
                for k, v in msg.fields.items()
            ],
        }
        if msg.body:
            embed["description"] = msg.body
        if msg.url:
            embed["url"] = msg.url

        return await self._post(subscription.target, {"embeds": [embed]}, "discord")


class TelegramChannel(_HttpPostChannel):
    """Delivers alerts via the Telegram Bot API (HTML parse mode).

    The subscription target is the chat id.
    """

    subscription_type = SubscriptionType.TELEGRAM

    def __init__(self, config: TelegramConfig, base_url: str = "") -> None:
        super().__init__(base_url=base_url, timeout_secs=config.timeout_secs)
        self._token = config.bot_token.get_secret_value()
        if not self._token:
            raise NotificationError("Telegram channel requires a bot token")

    async def send(
        self,
        check: Check,
        subscription: Subscription,
        alerts: Sequence[Alert],
    ) -> bool:
        msg = format_notification(check, alerts, self._base_url)
        text_parts = [f"<b>{html_escape(msg.title)}</b>"]
        if msg.body:
            text_parts.append(html_escape(msg.body))
        if msg.url:
            text_parts.append(html_escape(msg.url))

        url = f"https://api.telegram.org/bot{self._token}/sendMessage"
        payload = {
            "chat_id": subscription.target,
            "text": "\n".join(text_parts),
            "parse_mode": "HTML",
        }
        return await self._post(url, payload, "telegram")


class LoggerChannel(NotificationChannel):
    """Writes notifications to the structured log."""

    subscription_type = SubscriptionType.LOGGER

    async def send(
        self,
        check: Check,
        subscription: Subscription,
        alerts: Sequence[Alert],
    ) -> bool:
        msg = format_notification(check, alerts, self._base_url)
        logger.info(
            "check_notification",
            subscription=subscription.target,
            severity=msg.severity.name,
            title=msg.title,
            body=msg.body,
            fields=msg.fields,
            url=msg.url,
        )
        return True
