"""CheckRunner — one evaluation of a check: fetch, classify, alert, persist, notify.

A run never raises. Each collaborator call is turned into an ``Ok``/``Err``
value at its call site and recovered from locally:

- fetch failure: logged, nothing persisted, run ends;
- alert or state write failure: logged, run ends before dispatch;
- a target without data: logged, target ignored for this run;
- notification failures are isolated inside the dispatcher.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal

import structlog

from checkwatch.checker.target import TargetFetcher
from checkwatch.checker.value import ValueChecker
from checkwatch.core.logging import check_context
from checkwatch.core.result import Err, attempt
from checkwatch.core.types import Alert, AlertType, Check, worst
from checkwatch.notify.dispatcher import NotificationDispatcher
from checkwatch.store.base import AlertStore, CheckStore

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Pure decisions ──────────────────────────────────────────────


def initial_worst(check: Check) -> AlertType:
    """Starting point of the aggregation, before any target is seen."""
    return AlertType.OK if check.allow_no_data else AlertType.UNKNOWN


def suppresses_alert(check: Check, last: AlertType, current: AlertType) -> bool:
    """Whether a target moving from *last* to *current* should not be recorded."""
    if last == AlertType.OK and current == AlertType.OK:
        return True
    if not check.one_time and check.disable_same_state_alerts and last == current:
        return True
    # One-time checks never alert on a move into OK.
    return check.one_time and current == AlertType.OK


def is_notify_worthy(check: Check, last: AlertType, current: AlertType) -> bool:
    """Recurring checks notify only on a change; one-time checks always notify."""
    return check.one_time or last != current


def next_state(check: Check, worst_state: AlertType) -> AlertType:
    """Recurring checks follow the run; one-time checks only ever get worse."""
    if not check.one_time or worst_state.is_worse_than(check.state):
        return worst_state
    return check.state


# ── Runner ──────────────────────────────────────────────────────


class CheckRunner:
    """Evaluates checks against their collaborators.

    The runner keeps no per-run state, so one instance can evaluate many
    checks concurrently.

    Usage::

        runner = CheckRunner(alert_store, check_store, fetcher, value_checker, dispatcher)
        await runner.run(check)
    """

    def __init__(
        self,
        alert_store: AlertStore,
        check_store: CheckStore,
        target_fetcher: TargetFetcher,
        value_checker: ValueChecker,
        dispatcher: NotificationDispatcher,
        clock: Clock = _utcnow,
    ) -> None:
        self._alert_store = alert_store
        self._check_store = check_store
        self._target_fetcher = target_fetcher
        self._value_checker = value_checker
        self._dispatcher = dispatcher
        self._clock = clock

    async def run(self, check: Check) -> None:
        if not check.enabled:
            return

        now = self._clock()
        with check_context(check):
            try:
                await self._evaluate(check, now)
            except Exception:
                logger.exception("check_run_failed")

    async def _evaluate(self, check: Check, now: datetime) -> None:
        fetched = await attempt(self._target_fetcher.fetch(check, now))
        if isinstance(fetched, Err):
            logger.warning("check_fetch_failed", error=fetched.reason)
            return
        target_values = fetched.value

        worst_state = initial_worst(check)
        last = check.state
        interesting: list[Alert] = []
        created_count = 0

        for target, value in target_values.items():
            if value is None:
                logger.info("target_no_value", target=target)
                continue

            current = self._value_checker.check_value(value, check.warn, check.error)
            worst_state = worst(worst_state, current)

            if suppresses_alert(check, last, current):
                continue

            alert = _build_alert(check, target, value, last, current, now)
            created = await attempt(self._alert_store.create_alert(check.id, alert))
            if isinstance(created, Err):
                logger.warning("alert_create_failed", target=target, error=created.reason)
                return
            created_count += 1

            if is_notify_worthy(check, last, current):
                interesting.append(created.value)

        new_state = next_state(check, worst_state)
        updated = await attempt(
            self._check_store.update_state_and_last_values(
                check.id, new_state, now, dict(target_values),
            )
        )
        if isinstance(updated, Err):
            logger.warning("check_state_update_failed", error=updated.reason)
            return

        logger.info(
            "check_run_complete",
            previous_state=last.name,
            worst_state=worst_state.name,
            new_state=new_state.name,
            alerts_created=created_count,
            alerts_notified=len(interesting),
        )

        if not interesting:
            return

        await self._dispatcher.dispatch(updated.value, worst_state, interesting, now)


def _build_alert(
    check: Check,
    target: str,
    value: Decimal,
    from_type: AlertType,
    to_type: AlertType,
    now: datetime,
) -> Alert:
    return Alert(
        target=target,
        value=value,
        warn=check.warn,
        error=check.error,
        from_type=from_type,
        to_type=to_type,
        timestamp=now,
    )
