"""Target fetchers — turn a check into the latest reading per target."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from types import TracebackType
from typing import Any, Protocol

import httpx
import structlog

from checkwatch.checker.exceptions import TargetFetchError, TargetParseError
from checkwatch.core.config import GraphiteConfig, get_settings
from checkwatch.core.types import Check

logger = structlog.stdlib.get_logger()

TargetValues = dict[str, Decimal | None]


class TargetFetcher(Protocol):
    """Returns, for every target a check monitors, its value or None (no data)."""

    async def fetch(self, check: Check, now: datetime) -> TargetValues: ...


# ── Graphite payload parsing ───────────────────────────────────


def _latest_value(datapoints: Any) -> Decimal | None:
    """Return the most recent non-null datapoint value.

    Graphite datapoints are ``[value, timestamp]`` pairs in ascending time.
    """
    if not isinstance(datapoints, list):
        raise TargetParseError("datapoints is not a list")
    for point in reversed(datapoints):
        if not isinstance(point, list) or not point:
            raise TargetParseError(f"malformed datapoint {point!r}")
        raw = point[0]
        if raw is None:
            continue
        try:
            value = Decimal(str(raw))
        except InvalidOperation as exc:
            raise TargetParseError(f"non-numeric datapoint {raw!r}") from exc
        if not value.is_nan():
            return value
    return None


def _parse_render_response(body: Any) -> TargetValues:
    """Map each series in a Graphite ``/render?format=json`` body to its latest value."""
    if not isinstance(body, list):
        raise TargetParseError("Graphite returned a non-list body")

    values: TargetValues = {}
    for series in body:
        if not isinstance(series, dict) or "target" not in series:
            raise TargetParseError(f"malformed series {series!r}")
        values[str(series["target"])] = _latest_value(series.get("datapoints", []))
    return values


# ── Fetcher ────────────────────────────────────────────────────


class GraphiteTargetFetcher:
    """Fetches check targets from the Graphite render API.

    Usage::

        async with GraphiteTargetFetcher() as fetcher:
            values = await fetcher.fetch(check, now)
    """

    def __init__(self, config: GraphiteConfig | None = None) -> None:
        self._config = config or get_settings().graphite
        self._http: httpx.AsyncClient | None = None

    @property
    def connected(self) -> bool:
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        auth: httpx.BasicAuth | None = None
        if self._config.username:
            auth = httpx.BasicAuth(
                self._config.username,
                self._config.password.get_secret_value(),
            )
        self._http = httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            timeout=httpx.Timeout(self._config.timeout_secs),
            auth=auth,
        )

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def fetch(self, check: Check, now: datetime) -> TargetValues:
        if self._http is None:
            raise TargetFetchError("HTTP client not connected")

        params = {
            "target": check.target,
            "from": check.from_time,
            "until": check.until_time,
            "format": "json",
        }
        try:
            response = await self._http.get("/render", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TargetFetchError(
                f"Graphite returned {exc.response.status_code} for {check.target}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TargetFetchError(
                f"Graphite request failed for {check.target}: {exc}"
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise TargetParseError(
                f"Graphite returned invalid JSON for {check.target}"
            ) from exc

        values = _parse_render_response(body)
        logger.debug(
            "targets_fetched",
            check=check.name,
            count=len(values),
            at=now.isoformat(),
        )
        return values

    async def __aenter__(self) -> GraphiteTargetFetcher:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
