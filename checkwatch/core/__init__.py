"""Core module — config, types, logging."""

from checkwatch.core.config import (
    Settings,
    get_settings,
    load_checks,
    load_settings,
    reset_settings,
)
from checkwatch.core.logging import setup_logging
from checkwatch.core.result import Err, Ok, Result, attempt
from checkwatch.core.types import (
    Alert,
    AlertType,
    Check,
    Subscription,
    SubscriptionType,
    worst,
)

__all__ = [
    "Alert",
    "AlertType",
    "Check",
    "Err",
    "Ok",
    "Result",
    "Settings",
    "Subscription",
    "SubscriptionType",
    "attempt",
    "get_settings",
    "load_checks",
    "load_settings",
    "reset_settings",
    "setup_logging",
    "worst",
]
