"""checkwatch — threshold checks over time series, with alerting and notifications."""

__version__ = "0.1.0"
