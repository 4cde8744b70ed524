"""
CSS selection over parsed HTML documents.

Wraps BeautifulSoup (lxml parser) and soupsieve so that the rest of the
code only sees "document in, text or None out".
"""

from dataclasses import dataclass
from typing import Optional

import soupsieve
import structlog
from bs4 import BeautifulSoup, ParserRejectedMarkup

from .exceptions import ConfigurationError, MalformedDocumentError

logger = structlog.get_logger(__name__)

HTML_PARSER = "lxml"


@dataclass
class SelectorResult:
    """Result from selector evaluation."""
    value: Optional[str] = None
    found: bool = False


def parse_document(html: str) -> BeautifulSoup:
    """
    Parse HTML into a document.

    Args:
        html: Raw HTML text

    Returns:
        Parsed BeautifulSoup document

    Raises:
        MalformedDocumentError: If the content is empty, rejected by the
            parser, or contains no elements at all
    """
    if not html or not html.strip():
        raise MalformedDocumentError("empty document")

    try:
        soup = BeautifulSoup(html, HTML_PARSER)
    except ParserRejectedMarkup as e:
        raise MalformedDocumentError(str(e)) from e

    if soup.find() is None:
        raise MalformedDocumentError("document contains no elements")

    return soup


def validate_selector(selector: str) -> None:
    """
    Check CSS selector syntax.

    Raises:
        ConfigurationError: If the selector is empty or cannot be compiled
    """
    if not selector or not selector.strip():
        raise ConfigurationError("Empty CSS selector")

    try:
        soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as e:
        raise ConfigurationError(f"Invalid CSS selector {selector!r}: {e}") from e


class Selector:
    """
    CSS selector over one parsed document.

    Text of a matched element is the concatenation of its text nodes,
    separated by single spaces.
    """

    def __init__(self, soup: BeautifulSoup, base_url: str = ""):
        """
        Initialize selector with parsed HTML.

        Args:
            soup: BeautifulSoup parsed HTML
            base_url: URL the document was fetched from (for logging)
        """
        self.soup = soup
        self.base_url = base_url

    def css_one(self, selector: str) -> SelectorResult:
        """
        Select first element using CSS selector.

        Args:
            selector: CSS selector string

        Returns:
            SelectorResult with the first match
        """
        element = self.soup.select_one(selector)
        if element is None:
            logger.debug("selector_not_found", selector=selector, url=self.base_url)
            return SelectorResult(found=False)

        return SelectorResult(
            value=element.get_text(" ", strip=True),
            found=True,
        )


def select_text(document: BeautifulSoup, selector: str) -> Optional[str]:
    """Return text of the first element matching selector, or None."""
    result = Selector(document).css_one(selector)
    return result.value if result.found else None
