"""
Extraction of all configured values from one resolved resource.

The fetch is the only await; parsing, selection and normalization are
synchronous. Every configured selector yields exactly one ResultItem, in
selector order, whether or not the fetch succeeded.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Optional

import structlog

from .exceptions import FetchError, MalformedDocumentError
from .models import (
    ErrorKind,
    ExtractionError,
    ResolvedResource,
    ResultItem,
    SelectorSpec,
)
from .normalizer import normalize
from .selectors import parse_document, select_text

logger = structlog.get_logger(__name__)

FetchFn = Callable[[str], Awaitable[str]]
ParseFn = Callable[[str], Any]
SelectFn = Callable[[Any, str], Optional[str]]


def _failed_items(
    resolved: ResolvedResource,
    selectors: Sequence[SelectorSpec],
    error: ExtractionError,
) -> list[ResultItem]:
    """One error-valued item per selector."""
    return [
        ResultItem(
            name=spec.name,
            source_index=resolved.source_index,
            param_index=resolved.param_index,
            selector_index=i,
            url=resolved.url,
            error=error,
        )
        for i, spec in enumerate(selectors)
    ]


async def extract(
    resolved: ResolvedResource,
    selectors: Sequence[SelectorSpec],
    fetch: FetchFn,
    select: SelectFn = select_text,
    parse: ParseFn = parse_document,
) -> list[ResultItem]:
    """
    Fetch one resource and evaluate every selector against it.

    Args:
        resolved: Resource to fetch
        selectors: Selectors to evaluate, in output order
        fetch: Async function url -> HTML text, raising FetchError
        select: Function (document, css) -> text or None
        parse: Function HTML text -> document, raising MalformedDocumentError

    Returns:
        One ResultItem per selector, in selector order
    """
    log = logger.bind(url=resolved.url, source_index=resolved.source_index)

    try:
        html = await fetch(resolved.url)
    except FetchError as e:
        log.warning("fetch_failed", reason=e.reason)
        return _failed_items(
            resolved, selectors, ExtractionError(ErrorKind.FETCH_FAILED, e.reason)
        )

    try:
        document = parse(html)
    except MalformedDocumentError as e:
        log.warning("malformed_document", reason=str(e))
        return _failed_items(
            resolved, selectors, ExtractionError(ErrorKind.MALFORMED_DOCUMENT, str(e))
        )

    items = []
    for i, spec in enumerate(selectors):
        text = select(document, spec.selector)
        if text is None:
            items.append(ResultItem(
                name=spec.name,
                source_index=resolved.source_index,
                param_index=resolved.param_index,
                selector_index=i,
                url=resolved.url,
                error=ExtractionError(ErrorKind.SELECTOR_NOT_FOUND, spec.selector),
            ))
            continue

        items.append(ResultItem(
            name=spec.name,
            source_index=resolved.source_index,
            param_index=resolved.param_index,
            selector_index=i,
            url=resolved.url,
            value=normalize(text),
        ))

    log.debug(
        "resource_extracted",
        found=sum(1 for item in items if item.ok),
        total=len(items),
    )
    return items
