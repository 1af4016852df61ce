"""Target fetching and value classification."""

from checkwatch.checker.exceptions import CheckerError, TargetFetchError, TargetParseError
from checkwatch.checker.target import GraphiteTargetFetcher, TargetFetcher, TargetValues
from checkwatch.checker.value import ThresholdValueChecker, ValueChecker

__all__ = [
    "CheckerError",
    "GraphiteTargetFetcher",
    "TargetFetchError",
    "TargetFetcher",
    "TargetParseError",
    "TargetValues",
    "ThresholdValueChecker",
    "ValueChecker",
]
