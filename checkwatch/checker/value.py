"""Threshold classification of a single reading."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from checkwatch.core.types import AlertType


class ValueChecker(Protocol):
    def check_value(self, value: Decimal, warn: Decimal, error: Decimal) -> AlertType: ...


class ThresholdValueChecker:
    """Classifies a value against warn/error thresholds.

    When ``warn <= error`` higher values are worse. When ``warn > error`` the
    scale is inverted and lower values are worse (e.g. free disk space).
    """

    def check_value(self, value: Decimal, warn: Decimal, error: Decimal) -> AlertType:
        if warn <= error:
            if value >= error:
                return AlertType.ERROR
            if value >= warn:
                return AlertType.WARN
            return AlertType.OK

        if value <= error:
            return AlertType.ERROR
        if value <= warn:
            return AlertType.WARN
        return AlertType.OK
