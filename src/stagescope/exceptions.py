"""
Stagescope exceptions module.

Contains exception classes shared by the series engine, the catalog and the dashboard.
"""


class MissingMetricError(KeyError):
    """Raised when a metric path does not resolve to a scalar in a sample."""

    def __init__(self, path: str, reason: str = "") -> None:
        super().__init__(path)
        self.path = path
        self.reason = reason

    def __str__(self) -> str:
        if self.reason:
            return f"Metric '{self.path}' not found: {self.reason}"
        return f"Metric '{self.path}' not found"


class MalformedSampleError(ValueError):
    """Raised when a raw sample cannot be parsed into a MetricSample."""

    pass


class AppNotFoundError(Exception):
    """Exception raised when an application directory is not found."""

    pass
