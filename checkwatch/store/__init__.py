"""Check and alert persistence."""

from checkwatch.store.base import AlertStore, CheckStore
from checkwatch.store.exceptions import CheckNotFoundError, StoreError
from checkwatch.store.memory import InMemoryAlertStore, InMemoryCheckStore

__all__ = [
    "AlertStore",
    "CheckNotFoundError",
    "CheckStore",
    "InMemoryAlertStore",
    "InMemoryCheckStore",
    "StoreError",
]
