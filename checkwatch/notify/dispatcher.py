"""Notification fan-out — subscriptions × capable channels, each failure isolated."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

import structlog

from checkwatch.core.result import Err, attempt
from checkwatch.core.types import Alert, AlertType, Check, Subscription
from checkwatch.notify.channels import NotificationChannel
from checkwatch.notify.types import DeliveryResult

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Delivers a check's interesting alerts to its subscribers.

    - Eligibility is decided once per subscription, against the check-level
      worst severity of the run.
    - Every channel able to handle the subscription type gets one attempt.
    - A failed attempt is logged and reported in the returned results; it
      never stops delivery to the remaining channels or subscriptions.
    """

    def __init__(self, channels: Iterable[NotificationChannel] = ()) -> None:
        self._channels: list[NotificationChannel] = list(channels)

    @property
    def channels(self) -> list[NotificationChannel]:
        return list(self._channels)

    def register(self, channel: NotificationChannel) -> None:
        self._channels.append(channel)

    async def dispatch(
        self,
        check: Check,
        worst: AlertType,
        alerts: Sequence[Alert],
        now: datetime,
    ) -> list[DeliveryResult]:
        results: list[DeliveryResult] = []
        for subscription in check.subscriptions:
            if not self._eligible(subscription, now, worst):
                continue
            for channel in self._channels:
                if not channel.can_handle(subscription.type):
                    continue
                result = await self._deliver(channel, check, subscription, alerts)
                if not result.ok:
                    logger.warning(
                        "notification_failed",
                        check=check.name,
                        destination=subscription.target,
                        subscription_type=subscription.type.value,
                        channel=result.channel,
                        error=result.error,
                    )
                results.append(result)
        return results

    @staticmethod
    def _eligible(subscription: Subscription, now: datetime, worst: AlertType) -> bool:
        try:
            return subscription.should_notify(now, worst)
        except Exception:
            logger.exception(
                "subscription_eligibility_error",
                destination=subscription.target,
                subscription_type=subscription.type.value,
            )
            return False

    @staticmethod
    async def _deliver(
        channel: NotificationChannel,
        check: Check,
        subscription: Subscription,
        alerts: Sequence[Alert],
    ) -> DeliveryResult:
        outcome = await attempt(channel.send(check, subscription, alerts))
        if isinstance(outcome, Err):
            ok, error = False, outcome.reason
        else:
            # channels may return None for "sent"
            ok = outcome.value is not False
            error = None if ok else "channel reported delivery failure"
        return DeliveryResult(
            subscription_target=subscription.target,
            subscription_type=subscription.type,
            channel=channel.name,
            ok=ok,
            error=error,
        )

    async def close(self) -> None:
        for ch in self._channels:
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=ch.name)
