"""In-memory stores — per-check locking, immutable snapshots out."""

from __future__ import annotations

import asyncio
import uuid
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal

import structlog

from checkwatch.core.types import Alert, AlertType, Check, Subscription, frozen_values
from checkwatch.store.base import AlertStore, CheckStore
from checkwatch.store.exceptions import CheckNotFoundError

logger = structlog.stdlib.get_logger()


class InMemoryAlertStore(AlertStore):
    """Alert ledger held in process memory.

    Alerts are appended per check and never edited.
    """

    def __init__(self) -> None:
        self._alerts: dict[str, list[Alert]] = defaultdict(list)
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def create_alert(self, check_id: str, alert: Alert) -> Alert:
        stored = alert.model_copy(update={"id": uuid.uuid4().hex, "check_id": check_id})
        async with self._locks[check_id]:
            self._alerts[check_id].append(stored)
        logger.debug(
            "alert_created",
            check_id=check_id,
            target=stored.target,
            from_type=stored.from_type.name,
            to_type=stored.to_type.name,
        )
        return stored

    async def last_alert_for(self, target: str, check_id: str) -> Alert | None:
        for alert in reversed(self._alerts.get(check_id, [])):
            if alert.target == target:
                return alert
        return None

    async def alerts_for(self, check_id: str) -> list[Alert]:
        return list(reversed(self._alerts.get(check_id, [])))


class InMemoryCheckStore(CheckStore):
    """Check repository held in process memory.

    Writes for the same check id are serialised; writes for different ids
    never contend.
    """

    def __init__(self, checks: Iterable[Check] = ()) -> None:
        self._checks: dict[str, Check] = {c.id: c for c in checks}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _require(self, check_id: str) -> Check:
        try:
            return self._checks[check_id]
        except KeyError:
            raise CheckNotFoundError(f"No check with id {check_id!r}") from None

    async def get(self, check_id: str) -> Check:
        return self._require(check_id)

    async def list_checks(self, enabled_only: bool = False) -> list[Check]:
        return [c for c in self._checks.values() if c.enabled or not enabled_only]

    async def save(self, check: Check) -> Check:
        async with self._locks[check.id]:
            self._checks[check.id] = check
        return check

    async def add_subscription(self, check_id: str, subscription: Subscription) -> Check:
        async with self._locks[check_id]:
            current = self._require(check_id)
            if not subscription.id:
                subscription = subscription.model_copy(update={"id": uuid.uuid4().hex})
            updated = current.model_copy(
                update={"subscriptions": (*current.subscriptions, subscription)},
            )
            self._checks[check_id] = updated
        return updated

    async def update_state_and_last_values(
        self,
        check_id: str,
        state: AlertType,
        last_check: datetime,
        last_values: Mapping[str, Decimal | None],
    ) -> Check:
        async with self._locks[check_id]:
            current = self._require(check_id)
            updated = current.model_copy(
                update={
                    "state": state,
                    "last_check": last_check,
                    "last_values": frozen_values(last_values),
                },
            )
            self._checks[check_id] = updated
        return updated
