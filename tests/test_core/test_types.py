"""Tests for core domain types — severity order, subscriptions, check/alert models."""

from __future__ import annotations

import itertools
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from checkwatch.core.types import (
    Alert,
    AlertType,
    Check,
    Subscription,
    SubscriptionType,
    worst,
)

# 2026-03-04 is a Wednesday (weekday 2)
WEDNESDAY_NOON = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


def _sub(**kw: object) -> Subscription:
    defaults: dict[str, object] = {"target": "ops", "type": SubscriptionType.LOGGER}
    defaults.update(kw)
    return Subscription(**defaults)  # type: ignore[arg-type]


# ── AlertType ordering ──────────────────────────────────────────


class TestAlertTypeOrder:
    EXPECTED = [AlertType.UNKNOWN, AlertType.OK, AlertType.WARN, AlertType.ERROR]

    def test_total_order_exhaustive(self) -> None:
        for i, j in itertools.product(range(4), repeat=2):
            a, b = self.EXPECTED[i], self.EXPECTED[j]
            assert a.is_worse_than(b) == (i > j), (a, b)

    def test_unknown_never_worse(self) -> None:
        for other in AlertType:
            assert not AlertType.UNKNOWN.is_worse_than(other)

    def test_error_worse_than_all_others(self) -> None:
        for other in AlertType:
            if other != AlertType.ERROR:
                assert AlertType.ERROR.is_worse_than(other)

    def test_nothing_worse_than_itself(self) -> None:
        for t in AlertType:
            assert not t.is_worse_than(t)


class TestWorst:
    def test_empty_is_unknown(self) -> None:
        assert worst() == AlertType.UNKNOWN

    def test_supremum(self) -> None:
        assert worst(AlertType.OK, AlertType.UNKNOWN) == AlertType.OK
        assert worst(AlertType.WARN, AlertType.OK, AlertType.ERROR) == AlertType.ERROR

    def test_order_independent(self) -> None:
        values = [AlertType.OK, AlertType.UNKNOWN, AlertType.WARN, AlertType.OK]
        results = {worst(*p) for p in itertools.permutations(values)}
        assert results == {AlertType.WARN}


class TestAlertTypeParse:
    def test_names_case_insensitive(self) -> None:
        assert AlertType.parse("warn") == AlertType.WARN
        assert AlertType.parse(" ERROR ") == AlertType.ERROR

    def test_passthrough(self) -> None:
        assert AlertType.parse(AlertType.OK) is AlertType.OK
        assert AlertType.parse(3) == 3

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown alert type"):
            AlertType.parse("CRITICAL")


# ── Subscription eligibility ────────────────────────────────────


class TestShouldNotify:
    def test_default_notifies_everything(self) -> None:
        sub = _sub()
        for t in AlertType:
            assert sub.should_notify(WEDNESDAY_NOON, t)

    def test_disabled(self) -> None:
        assert not _sub(enabled=False).should_notify(WEDNESDAY_NOON, AlertType.ERROR)

    @pytest.mark.parametrize(
        ("flag", "severity"),
        [
            ("ignore_ok", AlertType.OK),
            ("ignore_warn", AlertType.WARN),
            ("ignore_error", AlertType.ERROR),
            ("ignore_unknown", AlertType.UNKNOWN),
        ],
    )
    def test_ignored_severity(self, flag: str, severity: AlertType) -> None:
        sub = _sub(**{flag: True})
        assert not sub.should_notify(WEDNESDAY_NOON, severity)
        others = [t for t in AlertType if t != severity]
        assert all(sub.should_notify(WEDNESDAY_NOON, t) for t in others)

    def test_weekday_filter(self) -> None:
        weekdays_only = _sub(weekdays=[0, 1, 2, 3, 4])
        assert weekdays_only.should_notify(WEDNESDAY_NOON, AlertType.ERROR)
        saturday = WEDNESDAY_NOON + timedelta(days=3)
        assert not weekdays_only.should_notify(saturday, AlertType.ERROR)

    def test_time_window(self) -> None:
        office = _sub(from_time=time(9, 0), to_time=time(17, 0))
        assert office.should_notify(WEDNESDAY_NOON, AlertType.ERROR)
        assert office.should_notify(WEDNESDAY_NOON.replace(hour=17), AlertType.ERROR)
        assert not office.should_notify(WEDNESDAY_NOON.replace(hour=18), AlertType.ERROR)

    def test_default_window_covers_last_minute(self) -> None:
        last_instant = WEDNESDAY_NOON.replace(hour=23, minute=59, second=59, microsecond=500000)
        assert _sub().should_notify(last_instant, AlertType.ERROR)

    def test_window_end_includes_whole_minute(self) -> None:
        office = _sub(from_time=time(9, 0), to_time=time(17, 0))
        assert office.should_notify(WEDNESDAY_NOON.replace(hour=17, second=30), AlertType.ERROR)
        assert not office.should_notify(WEDNESDAY_NOON.replace(hour=17, minute=1), AlertType.ERROR)

    def test_window_start_ignores_seconds(self) -> None:
        office = _sub(from_time=time(9, 0, 45), to_time=time(17, 0))
        assert office.should_notify(WEDNESDAY_NOON.replace(hour=9), AlertType.ERROR)
        assert not office.should_notify(
            WEDNESDAY_NOON.replace(hour=8, minute=59, second=59), AlertType.ERROR,
        )

    def test_weekdays_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError, match="weekdays"):
            _sub(weekdays=[0, 7])
        with pytest.raises(ValidationError):
            _sub(weekdays=[-1])

    def test_window_wraps_midnight(self) -> None:
        night = _sub(from_time=time(22, 0), to_time=time(6, 0))
        assert night.should_notify(WEDNESDAY_NOON.replace(hour=23), AlertType.ERROR)
        assert night.should_notify(WEDNESDAY_NOON.replace(hour=3), AlertType.ERROR)
        assert not night.should_notify(WEDNESDAY_NOON, AlertType.ERROR)

    def test_non_utc_time_is_converted(self) -> None:
        office = _sub(from_time=time(9, 0), to_time=time(17, 0))
        # 20:00 at UTC-8 is 04:00 UTC the next day
        pacific = timezone(timedelta(hours=-8))
        evening = datetime(2026, 3, 4, 20, 0, tzinfo=pacific)
        assert not office.should_notify(evening, AlertType.ERROR)

    def test_type_parsed_case_insensitive(self) -> None:
        assert _sub(type="http").type == SubscriptionType.HTTP


# ── Check / Alert models ────────────────────────────────────────


class TestCheckModel:
    def test_defaults(self) -> None:
        check = Check(id="c", name="n", warn=Decimal(1), error=Decimal(2))
        assert check.enabled
        assert not check.allow_no_data
        assert not check.one_time
        assert check.state == AlertType.OK
        assert check.subscriptions == ()
        assert check.last_values == {}

    def test_state_from_name(self) -> None:
        check = Check(id="c", name="n", warn=1, error=2, state="error")  # type: ignore[arg-type]
        assert check.state == AlertType.ERROR

    def test_frozen(self) -> None:
        check = Check(id="c", name="n", warn=Decimal(1), error=Decimal(2))
        with pytest.raises(ValidationError):
            check.state = AlertType.ERROR  # type: ignore[misc]

    def test_last_values_read_only(self) -> None:
        source = {"t": Decimal(1)}
        check = Check(id="c", name="n", warn=Decimal(1), error=Decimal(2), last_values=source)
        with pytest.raises(TypeError):
            check.last_values["t"] = Decimal(9)  # type: ignore[index]
        source["t"] = Decimal(9)
        assert check.last_values == {"t": Decimal(1)}

    def test_hashable(self) -> None:
        kw: dict[str, object] = {
            "id": "c",
            "name": "n",
            "warn": Decimal(1),
            "error": Decimal(2),
            "last_values": {"t": Decimal(1), "gone": None},
            "subscriptions": (_sub(),),
        }
        a, b = Check(**kw), Check(**kw)  # type: ignore[arg-type]
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_dump_last_values_as_dict(self) -> None:
        check = Check(id="c", name="n", warn=1, error=2, last_values={"t": 1})  # type: ignore[arg-type]
        assert check.model_dump()["last_values"] == {"t": Decimal(1)}

    def test_requires_thresholds(self) -> None:
        with pytest.raises(ValidationError):
            Check(id="c", name="n")  # type: ignore[call-arg]


class TestAlertModel:
    def test_from_names(self) -> None:
        alert = Alert(
            target="t",
            value=Decimal("1.5"),
            warn=Decimal(1),
            error=Decimal(2),
            from_type="OK",  # type: ignore[arg-type]
            to_type="WARN",  # type: ignore[arg-type]
            timestamp=WEDNESDAY_NOON,
        )
        assert alert.from_type == AlertType.OK
        assert alert.to_type == AlertType.WARN
        assert alert.id is None
