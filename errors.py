class AnalyticsError(Exception):
    """Base class for analytics runtime failures."""


class DataUnavailable(AnalyticsError):
    """The record store failed, timed out or returned nothing usable."""

    def __init__(self, source: str, reason: str = "") -> None:
        self.source = source
        self.reason = reason
        message = f"{source} unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ComputationDegenerate(AnalyticsError):
    """A metric is undefined for the given input (e.g. zero total volume)."""
