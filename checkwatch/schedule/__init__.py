"""Check evaluation and scheduling."""

from checkwatch.schedule.runner import (
    CheckRunner,
    initial_worst,
    is_notify_worthy,
    next_state,
    suppresses_alert,
)
from checkwatch.schedule.scheduler import CheckScheduler

__all__ = [
    "CheckRunner",
    "CheckScheduler",
    "initial_worst",
    "is_notify_worthy",
    "next_state",
    "suppresses_alert",
]
