"""
Exception hierarchy for rvp.

ConfigurationError is fatal and raised before any network activity.
FetchError and MalformedDocumentError are raised by the I/O layer and
converted to per-item ExtractionError values by the extraction unit.
"""


class RvpError(Exception):
    """Base class for all rvp exceptions."""


class ConfigurationError(RvpError):
    """Invalid configuration or unresolvable resource template."""


class FetchError(RvpError):
    """Fetching a resource failed (network error, HTTP error status, timeout)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")


class MalformedDocumentError(RvpError):
    """Fetched content could not be parsed into an HTML document."""
