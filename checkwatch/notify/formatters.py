"""Pure functions that render a check and its alerts for delivery."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from checkwatch.core.types import Alert, AlertType, Check, worst
from checkwatch.notify.types import NotificationMessage


def check_url(check: Check, base_url: str) -> str:
    """Link to the check in the dashboard (empty when no base URL is set)."""
    if not base_url:
        return ""
    return f"{base_url.rstrip('/')}/#/checks/{check.id}"


def format_alert_line(alert: Alert) -> str:
    """One line per alert, e.g. ``web.cpu: OK -> ERROR (value=95, warn=70, error=90)``."""
    return (
        f"{alert.target}: {alert.from_type.name} -> {alert.to_type.name} "
        f"(value={alert.value}, warn={alert.warn}, error={alert.error})"
    )


def format_notification(
    check: Check,
    alerts: Sequence[Alert],
    base_url: str = "",
) -> NotificationMessage:
    """Summarise *alerts* raised for *check* into a NotificationMessage.

    The message severity is the worst alert destination state, falling back
    to the check's current state when there are no alerts.
    """
    severity = worst(*(a.to_type for a in alerts)) if alerts else check.state
    fields: dict[str, str] = {
        "check_id": check.id,
        "state": check.state.name,
        "warn": str(check.warn),
        "error": str(check.error),
    }
    if check.last_check is not None:
        fields["last_check"] = check.last_check.isoformat()

    return NotificationMessage(
        severity=severity,
        title=f"{check.name} is {severity.name}",
        body="\n".join(format_alert_line(a) for a in alerts),
        fields=fields,
        url=check_url(check, base_url),
    )


def alert_payload(alert: Alert) -> dict[str, Any]:
    """JSON-safe dict for a single alert."""
    data = alert.model_dump(mode="json")
    data["from_type"] = alert.from_type.name
    data["to_type"] = alert.to_type.name
    return data


def notification_payload(
    check: Check,
    alerts: Sequence[Alert],
    base_url: str = "",
) -> dict[str, Any]:
    """JSON body posted by the generic HTTP channel."""
    message = format_notification(check, alerts, base_url)
    return {
        "check": {
            "id": check.id,
            "name": check.name,
            "description": check.description,
            "state": check.state.name,
            "warn": str(check.warn),
            "error": str(check.error),
        },
        "severity": message.severity.name,
        "title": message.title,
        "url": message.url,
        "alerts": [alert_payload(a) for a in alerts],
    }


# Discord embed colours keyed by severity.
SEVERITY_COLORS: dict[AlertType, int] = {
    AlertType.UNKNOWN: 0x95A5A6,  # grey
    AlertType.OK: 0x2ECC71,       # green
    AlertType.WARN: 0xF39C12,     # orange
    AlertType.ERROR: 0xE74C3C,    # red
}
