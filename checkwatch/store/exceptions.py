"""Exceptions raised by check and alert stores."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for store errors."""


class CheckNotFoundError(StoreError):
    """No check exists with the requested id."""
