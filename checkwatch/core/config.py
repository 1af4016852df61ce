"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, SecretStr

from checkwatch.core.types import Check

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class GraphiteConfig(BaseModel):
    """Graphite render API used to fetch target values."""

    url: str = "http://localhost:80"
    timeout_secs: float = 10.0
    username: str = ""
    password: SecretStr = SecretStr("")


class SchedulerConfig(BaseModel):
    """How often and how widely checks are evaluated."""

    interval_secs: float = 60.0
    max_concurrent_checks: int = 10
    run_timeout_secs: float = 30.0


class HttpChannelConfig(BaseModel):
    """Generic JSON webhook delivery."""

    enabled: bool = True
    timeout_secs: float = 10.0


class DiscordConfig(BaseModel):
    """Discord webhook delivery (subscription target is the webhook URL)."""

    enabled: bool = False
    timeout_secs: float = 10.0


class TelegramConfig(BaseModel):
    """Telegram Bot API delivery (subscription target is the chat id)."""

    enabled: bool = False
    bot_token: SecretStr = SecretStr("")
    timeout_secs: float = 10.0


class LoggerChannelConfig(BaseModel):
    """Notifications written to the structured log."""

    enabled: bool = True


class NotificationsConfig(BaseModel):
    """Container for notification channel configuration."""

    base_url: str = "http://localhost:8080"
    http: HttpChannelConfig = HttpChannelConfig()
    discord: DiscordConfig = DiscordConfig()
    telegram: TelegramConfig = TelegramConfig()
    logger: LoggerChannelConfig = LoggerChannelConfig()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    graphite: GraphiteConfig = GraphiteConfig()
    scheduler: SchedulerConfig = SchedulerConfig()
    notifications: NotificationsConfig = NotificationsConfig()
    logging: LoggingConfig = LoggingConfig()
    checks_file: str = "config/checks.yaml"


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        return None
    with open(path) as f:
        return yaml.safe_load(f)


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    raw = _read_yaml(config_path)
    if isinstance(raw, dict):
        data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None


def load_checks(path: str | Path) -> list[Check]:
    """Parse check definitions from a YAML file.

    The file holds either a list of checks or a mapping with a ``checks``
    key. A missing file yields no checks.
    """
    raw = _read_yaml(Path(path))
    if isinstance(raw, dict):
        raw = raw.get("checks")
    if not isinstance(raw, list):
        return []
    return [Check.model_validate(item) for item in raw]
