"""Exception hierarchy for target fetching and value classification."""

from __future__ import annotations


class CheckerError(Exception):
    """Base exception for all checker errors."""


class TargetFetchError(CheckerError):
    """Failed to reach the metrics backend or it answered with an error."""


class TargetParseError(CheckerError):
    """Failed to parse a response from the metrics backend."""
