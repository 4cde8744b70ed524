"""
Core layer - value extraction engine.

Components:
- models: Configuration, resolved resources, typed values, result items
- normalizer: Raw text -> Text / Number
- resolver: URL template x parameters -> concrete resources
- selectors: HTML parsing and CSS selection
- extraction: Fetch + select + normalize for one resource
- http_client: Async httpx client with timeout and optional retries
"""

from .exceptions import (
    RvpError,
    ConfigurationError,
    FetchError,
    MalformedDocumentError,
)
from .models import (
    URL_PARAM_PLACEHOLDER,
    SelectorSpec,
    ResourceSpec,
    Configuration,
    ResolvedResource,
    Text,
    Number,
    ExtractedValue,
    ErrorKind,
    ExtractionError,
    ResultItem,
)
from .normalizer import normalize
from .resolver import resolve
from .extraction import extract

__all__ = [
    "RvpError",
    "ConfigurationError",
    "FetchError",
    "MalformedDocumentError",
    "URL_PARAM_PLACEHOLDER",
    "SelectorSpec",
    "ResourceSpec",
    "Configuration",
    "ResolvedResource",
    "Text",
    "Number",
    "ExtractedValue",
    "ErrorKind",
    "ExtractionError",
    "ResultItem",
    "normalize",
    "resolve",
    "extract",
]
