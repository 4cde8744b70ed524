"""
Data models for rvp.

Configuration side (SelectorSpec, ResourceSpec, Configuration) is loaded
once per invocation and never mutated. Extraction side (ResolvedResource,
Text, Number, ResultItem) lives for a single batch run.
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from .exceptions import ConfigurationError

URL_PARAM_PLACEHOLDER = "%%"


@dataclass(frozen=True)
class SelectorSpec:
    """Named CSS selector path to a value on a web page."""

    name: str
    selector: str

    def to_dict(self) -> dict:
        return {"name": self.name, "selector": self.selector}


@dataclass(frozen=True)
class ResourceSpec:
    """
    A web page (URL template) with the selectors to extract from it.

    The template may contain URL_PARAM_PLACEHOLDER, substituted at
    resolution time.
    """

    url_template: str
    selectors: tuple[SelectorSpec, ...] = ()

    def __post_init__(self):
        # Accept any sequence but store a tuple
        object.__setattr__(self, "selectors", tuple(self.selectors))

        seen = set()
        for spec in self.selectors:
            if spec.name in seen:
                raise ConfigurationError(
                    f"Duplicate selector name {spec.name!r} for resource {self.url_template!r}"
                )
            seen.add(spec.name)

    @property
    def needs_parameter(self) -> bool:
        return URL_PARAM_PLACEHOLDER in self.url_template

    def to_dict(self) -> dict:
        return {
            "url": self.url_template,
            "selectors": [s.to_dict() for s in self.selectors],
        }


@dataclass(frozen=True)
class Configuration:
    """Ordered list of resources to extract values from."""

    resources: tuple[ResourceSpec, ...] = ()
    name: str = ""
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "resources", tuple(self.resources))

    @property
    def needs_parameters(self) -> bool:
        return any(r.needs_parameter for r in self.resources)

    def to_dict(self) -> dict:
        data = {}
        if self.name:
            data["name"] = self.name
        if self.description:
            data["description"] = self.description
        data["resources"] = [r.to_dict() for r in self.resources]
        return data


@dataclass(frozen=True)
class ResolvedResource:
    """Concrete URL to fetch, with its position in the batch."""

    url: str
    source_index: int
    param_index: int = 0
    param: Optional[str] = None


@dataclass(frozen=True)
class Text:
    """Extracted value that is not a number."""

    text: str

    @property
    def display(self) -> str:
        return self.text

    def to_json(self) -> str:
        return self.text


@dataclass(frozen=True)
class Number:
    """Extracted numeric value, with the text it was parsed from."""

    value: Decimal
    original_text: str

    @property
    def display(self) -> str:
        return self.original_text

    def to_json(self) -> Union[int, float, str]:
        """JSON-safe form; values beyond the float range keep their source text."""
        if self.value == self.value.to_integral_value():
            return int(self.value)
        number = float(self.value)
        if not math.isfinite(number):
            return self.original_text
        return number


ExtractedValue = Union[Text, Number]


class ErrorKind(str, Enum):
    """Why a single value could not be extracted."""
    SELECTOR_NOT_FOUND = "selector_not_found"
    FETCH_FAILED = "fetch_failed"
    MALFORMED_DOCUMENT = "malformed_document"


_ERROR_LABELS = {
    ErrorKind.SELECTOR_NOT_FOUND: "selector not found",
    ErrorKind.FETCH_FAILED: "fetch failed",
    ErrorKind.MALFORMED_DOCUMENT: "malformed document",
}


@dataclass(frozen=True)
class ExtractionError:
    """Per-item extraction failure. Does not affect sibling items."""

    kind: ErrorKind
    reason: str = ""

    def __str__(self) -> str:
        label = _ERROR_LABELS[self.kind]
        return f"{label}: {self.reason}" if self.reason else label


@dataclass(frozen=True)
class ResultItem:
    """
    Outcome of one selector on one resolved resource.

    Exactly one of value / error is set.
    """

    name: str
    source_index: int
    param_index: int
    selector_index: int
    url: str
    value: Optional[ExtractedValue] = None
    error: Optional[ExtractionError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.source_index, self.param_index, self.selector_index)

    @property
    def display(self) -> str:
        if self.error is not None:
            return f"ERROR: {self.error}"
        return self.value.display

    def to_dict(self) -> dict:
        """Convert to the JSON output shape."""
        if self.error is not None:
            return {"name": self.name, "value": self.display}
        return {"name": self.name, "value": self.value.to_json()}
