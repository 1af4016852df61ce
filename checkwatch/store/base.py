"""Store interfaces for checks and their alert history."""

from __future__ import annotations

import abc
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal

from checkwatch.core.types import Alert, AlertType, Check, Subscription


class AlertStore(abc.ABC):
    """Append-only ledger of alerts, keyed by check id."""

    @abc.abstractmethod
    async def create_alert(self, check_id: str, alert: Alert) -> Alert:
        """Persist *alert* for *check_id* and return the stored copy."""

    @abc.abstractmethod
    async def last_alert_for(self, target: str, check_id: str) -> Alert | None:
        """Most recent alert raised for *target* of *check_id*, if any."""

    @abc.abstractmethod
    async def alerts_for(self, check_id: str) -> list[Alert]:
        """All alerts for *check_id*, newest first."""


class CheckStore(abc.ABC):
    """Owner of the canonical check state."""

    @abc.abstractmethod
    async def get(self, check_id: str) -> Check:
        """Return the current snapshot. Raises CheckNotFoundError."""

    @abc.abstractmethod
    async def list_checks(self, enabled_only: bool = False) -> list[Check]:
        """Return snapshots of all (or only enabled) checks."""

    @abc.abstractmethod
    async def save(self, check: Check) -> Check:
        """Create or replace a check."""

    @abc.abstractmethod
    async def add_subscription(self, check_id: str, subscription: Subscription) -> Check:
        """Append a subscription and return the updated snapshot."""

    @abc.abstractmethod
    async def update_state_and_last_values(
        self,
        check_id: str,
        state: AlertType,
        last_check: datetime,
        last_values: Mapping[str, Decimal | None],
    ) -> Check:
        """Atomically set state, last-check time and last values.

        Returns the freshly persisted snapshot, including subscriptions added
        by other writers in the meantime.
        """
