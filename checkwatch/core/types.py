"""Domain types for check evaluation: severities, checks, alerts, subscriptions."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, time, timezone
from decimal import Decimal
from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class AlertType(IntEnum):
    """Alert severity, ordered by how much it outranks others when aggregating.

    UNKNOWN sits below OK: it stands for "no confirmed signal yet", so any
    real measurement, even a healthy one, replaces it.
    """

    UNKNOWN = 0
    OK = 1
    WARN = 2
    ERROR = 3

    def is_worse_than(self, other: AlertType) -> bool:
        return self > other

    @classmethod
    def parse(cls, value: Any) -> Any:
        """Accept a member name ("WARN", "warn") as well as the member or its value."""
        if isinstance(value, str) and not value.isdigit():
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown alert type {value!r}") from None
        return value


def worst(*types: AlertType) -> AlertType:
    """Return the supremum of *types* (UNKNOWN when empty)."""
    return max(types, default=AlertType.UNKNOWN)


class SubscriptionType(StrEnum):
    """Notification channel kinds a subscription can target."""

    HTTP = "HTTP"
    DISCORD = "DISCORD"
    TELEGRAM = "TELEGRAM"
    LOGGER = "LOGGER"


_ALL_WEEKDAYS = frozenset(range(7))


def _to_minute(moment: time) -> time:
    return moment.replace(second=0, microsecond=0, tzinfo=None)


def frozen_values(values: Mapping[str, Decimal | None]) -> Mapping[str, Decimal | None]:
    """Read-only copy of a target -> latest value mapping."""
    return MappingProxyType(dict(values))


class Subscription(BaseModel):
    """A notification destination plus its own eligibility rule.

    ``weekdays`` uses Python numbering (Monday=0). The ``from_time``..``to_time``
    window is inclusive at minute precision and evaluated in UTC; a window
    whose start is after its end wraps past midnight.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    target: str
    type: SubscriptionType
    enabled: bool = True
    ignore_ok: bool = False
    ignore_warn: bool = False
    ignore_error: bool = False
    ignore_unknown: bool = False
    weekdays: frozenset[int] = _ALL_WEEKDAYS
    from_time: time = time(0, 0)
    to_time: time = time(23, 59)

    @field_validator("type", mode="before")
    @classmethod
    def _upper_type(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("weekdays")
    @classmethod
    def _check_weekdays(cls, v: frozenset[int]) -> frozenset[int]:
        invalid = sorted(v - _ALL_WEEKDAYS)
        if invalid:
            raise ValueError(f"weekdays must be in 0..6 (Monday=0), got {invalid}")
        return v

    def _ignores(self, severity: AlertType) -> bool:
        return {
            AlertType.OK: self.ignore_ok,
            AlertType.WARN: self.ignore_warn,
            AlertType.ERROR: self.ignore_error,
            AlertType.UNKNOWN: self.ignore_unknown,
        }[severity]

    def _in_window(self, moment: time) -> bool:
        moment = _to_minute(moment)
        start, end = _to_minute(self.from_time), _to_minute(self.to_time)
        if start <= end:
            return start <= moment <= end
        return moment >= start or moment <= end

    def should_notify(self, now: datetime, severity: AlertType) -> bool:
        if not self.enabled or self._ignores(severity):
            return False
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        if now.weekday() not in self.weekdays:
            return False
        return self._in_window(now.time())


class Check(BaseModel):
    """Immutable snapshot of a monitored check.

    Only the check store produces new snapshots; evaluation reads one
    snapshot before the run and receives a fresh one from the store after
    persisting the new state.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    target: str = ""
    from_time: str = "-11minutes"
    until_time: str = "-1minutes"
    warn: Decimal
    error: Decimal
    enabled: bool = True
    allow_no_data: bool = False
    one_time: bool = False
    disable_same_state_alerts: bool = False
    state: AlertType = AlertType.OK
    last_check: datetime | None = None
    last_values: Mapping[str, Decimal | None] = Field(
        default_factory=lambda: frozen_values({}),
    )
    subscriptions: tuple[Subscription, ...] = ()

    @field_validator("state", mode="before")
    @classmethod
    def _parse_state(cls, v: Any) -> Any:
        return AlertType.parse(v)

    @field_validator("last_values")
    @classmethod
    def _freeze_last_values(cls, v: Mapping[str, Decimal | None]) -> Mapping[str, Decimal | None]:
        return frozen_values(v)

    @field_serializer("last_values")
    def _dump_last_values(self, v: Mapping[str, Decimal | None]) -> dict[str, Decimal | None]:
        return dict(v)

    def __hash__(self) -> int:
        return hash((
            self.id,
            self.state,
            self.last_check,
            frozenset(self.last_values.items()),
            self.subscriptions,
        ))


class Alert(BaseModel):
    """Audit record of one target's classification change."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    check_id: str | None = None
    target: str
    value: Decimal
    warn: Decimal
    error: Decimal
    from_type: AlertType
    to_type: AlertType
    timestamp: datetime

    @field_validator("from_type", "to_type", mode="before")
    @classmethod
    def _parse_type(cls, v: Any) -> Any:
        return AlertType.parse(v)
