"""Tests for NotificationDispatcher — eligibility, capability routing, failure isolation."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal

from checkwatch.core.types import Alert, AlertType, Check, Subscription, SubscriptionType
from checkwatch.notify.channels import NotificationChannel
from checkwatch.notify.dispatcher import NotificationDispatcher

NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


# ── Helpers ─────────────────────────────────────────────────────


class FakeChannel(NotificationChannel):
    """In-memory channel for testing."""

    subscription_type = SubscriptionType.HTTP

    def __init__(
        self,
        handles: SubscriptionType = SubscriptionType.HTTP,
        fail: bool = False,
        result: bool | None = True,
    ) -> None:
        super().__init__()
        self.subscription_type = handles
        self._fail = fail
        self._result = result
        self.sent: list[tuple[Check, Subscription, list[Alert]]] = []
        self.closed = False

    async def send(
        self,
        check: Check,
        subscription: Subscription,
        alerts: Sequence[Alert],
    ) -> bool:
        if self._fail:
            raise ConnectionError("fake error")
        self.sent.append((check, subscription, list(alerts)))
        return self._result  # type: ignore[return-value]

    async def close(self) -> None:
        self.closed = True


class ExplodingSubscription(Subscription):
    def should_notify(self, now: datetime, severity: AlertType) -> bool:
        raise RuntimeError("broken rule")


def _sub(target: str = "https://hook", **kw: object) -> Subscription:
    defaults: dict[str, object] = {"target": target, "type": SubscriptionType.HTTP}
    defaults.update(kw)
    return Subscription(**defaults)  # type: ignore[arg-type]


def _check(*subs: Subscription) -> Check:
    return Check(
        id="c1",
        name="load",
        warn=Decimal(1),
        error=Decimal(2),
        state=AlertType.ERROR,
        subscriptions=subs,
    )


def _alert() -> Alert:
    return Alert(
        target="t",
        value=Decimal(3),
        warn=Decimal(1),
        error=Decimal(2),
        from_type=AlertType.OK,
        to_type=AlertType.ERROR,
        timestamp=NOW,
    )


# ── Routing ─────────────────────────────────────────────────────


class TestRouting:
    async def test_send_to_capable_channel(self) -> None:
        ch = FakeChannel()
        disp = NotificationDispatcher([ch])
        sub = _sub()
        results = await disp.dispatch(_check(sub), AlertType.ERROR, [_alert()], NOW)

        assert len(ch.sent) == 1
        assert ch.sent[0][1] == sub
        assert len(results) == 1
        assert results[0].ok
        assert results[0].channel == "FakeChannel"
        assert results[0].subscription_target == "https://hook"

    async def test_incapable_channel_skipped_silently(self) -> None:
        ch = FakeChannel(handles=SubscriptionType.DISCORD)
        disp = NotificationDispatcher([ch])
        results = await disp.dispatch(_check(_sub()), AlertType.ERROR, [_alert()], NOW)
        assert ch.sent == []
        assert results == []

    async def test_every_subscription_times_every_capable_channel(self) -> None:
        http1, http2 = FakeChannel(), FakeChannel()
        discord = FakeChannel(handles=SubscriptionType.DISCORD)
        disp = NotificationDispatcher([http1, discord, http2])
        check = _check(
            _sub("a"),
            _sub("b"),
            _sub("c", type=SubscriptionType.DISCORD),
        )
        results = await disp.dispatch(check, AlertType.ERROR, [_alert()], NOW)

        assert len(http1.sent) == 2
        assert len(http2.sent) == 2
        assert len(discord.sent) == 1
        assert len(results) == 5

    async def test_no_subscriptions(self) -> None:
        ch = FakeChannel()
        disp = NotificationDispatcher([ch])
        assert await disp.dispatch(_check(), AlertType.ERROR, [_alert()], NOW) == []

    async def test_register(self) -> None:
        disp = NotificationDispatcher()
        ch = FakeChannel()
        disp.register(ch)
        assert disp.channels == [ch]


# ── Eligibility ─────────────────────────────────────────────────


class TestEligibility:
    async def test_ineligible_subscription_skipped(self) -> None:
        ch = FakeChannel()
        disp = NotificationDispatcher([ch])
        check = _check(_sub("muted", ignore_error=True), _sub("loud"))
        await disp.dispatch(check, AlertType.ERROR, [_alert()], NOW)
        assert [s.target for _, s, _ in ch.sent] == ["loud"]

    async def test_uses_given_worst_severity(self) -> None:
        ch = FakeChannel()
        disp = NotificationDispatcher([ch])
        check = _check(_sub(ignore_warn=True))
        await disp.dispatch(check, AlertType.WARN, [_alert()], NOW)
        assert ch.sent == []

    async def test_broken_eligibility_rule_is_skipped(self) -> None:
        ch = FakeChannel()
        disp = NotificationDispatcher([ch])
        broken = ExplodingSubscription(target="x", type=SubscriptionType.HTTP)
        check = _check(broken, _sub("ok"))
        await disp.dispatch(check, AlertType.ERROR, [_alert()], NOW)
        assert [s.target for _, s, _ in ch.sent] == ["ok"]


# ── Failure isolation ───────────────────────────────────────────


class TestFailureIsolation:
    async def test_raising_channel_becomes_failed_result(self) -> None:
        bad = FakeChannel(fail=True)
        good = FakeChannel()
        disp = NotificationDispatcher([bad, good])
        results = await disp.dispatch(_check(_sub()), AlertType.ERROR, [_alert()], NOW)

        assert [r.ok for r in results] == [False, True]
        assert "ConnectionError" in (results[0].error or "")
        assert len(good.sent) == 1

    async def test_failure_does_not_stop_next_subscription(self) -> None:
        bad = FakeChannel(fail=True)
        disp = NotificationDispatcher([bad])
        results = await disp.dispatch(
            _check(_sub("a"), _sub("b")), AlertType.ERROR, [_alert()], NOW,
        )
        assert [r.subscription_target for r in results] == ["a", "b"]
        assert not any(r.ok for r in results)

    async def test_false_return_is_failure(self) -> None:
        ch = FakeChannel(result=False)
        disp = NotificationDispatcher([ch])
        results = await disp.dispatch(_check(_sub()), AlertType.ERROR, [_alert()], NOW)
        assert not results[0].ok
        assert results[0].error == "channel reported delivery failure"

    async def test_none_return_is_success(self) -> None:
        ch = FakeChannel(result=None)
        disp = NotificationDispatcher([ch])
        results = await disp.dispatch(_check(_sub()), AlertType.ERROR, [_alert()], NOW)
        assert results[0].ok


# ── Lifecycle ───────────────────────────────────────────────────


class TestClose:
    async def test_close_all_channels(self) -> None:
        ch1, ch2 = FakeChannel(), FakeChannel()
        disp = NotificationDispatcher([ch1, ch2])
        await disp.close()
        assert ch1.closed
        assert ch2.closed

    async def test_close_error_does_not_stop_others(self) -> None:
        class BadClose(FakeChannel):
            async def close(self) -> None:
                raise RuntimeError("close failed")

        good = FakeChannel()
        disp = NotificationDispatcher([BadClose(), good])
        await disp.close()
        assert good.closed
