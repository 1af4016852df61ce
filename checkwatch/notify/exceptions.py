"""Notification exceptions."""

from __future__ import annotations


class NotificationError(Exception):
    """A notification channel is misconfigured or failed to deliver."""
