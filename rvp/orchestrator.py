"""
Batch orchestrator for the extraction pipeline.

Coordinates:
- Resource resolution (fatal configuration errors before any fetch)
- Concurrent extraction, one task per resolved resource
- Reassembly in resource -> parameter -> selector order
"""

import asyncio
from collections.abc import Sequence
from typing import Optional

import structlog

from .core.exceptions import ConfigurationError
from .core.extraction import FetchFn, extract
from .core.http_client import DEFAULT_TIMEOUT, HttpClient
from .core.models import (
    Configuration,
    ErrorKind,
    ResolvedResource,
    ResourceSpec,
    ResultItem,
    SelectorSpec,
)
from .core.resolver import Params, resolve
from .core.selectors import validate_selector

logger = structlog.get_logger(__name__)


def all_failed(items: Sequence[ResultItem]) -> bool:
    """True if there is at least one item and none of them succeeded."""
    return bool(items) and not any(item.ok for item in items)


def validate_selectors(config: Configuration) -> None:
    """
    Check every selector of config compiles as CSS.

    Raises:
        ConfigurationError: On the first invalid selector, naming its resource
    """
    for i, resource in enumerate(config.resources):
        for spec in resource.selectors:
            try:
                validate_selector(spec.selector)
            except ConfigurationError as e:
                raise ConfigurationError(f"Resource {i + 1}, selector {spec.name!r}: {e}") from e


class BatchRunner:
    """
    Runs extraction over every resource of a Configuration.

    A failing resource or selector never affects its siblings; the only
    batch-level failure is a ConfigurationError raised before fetching.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 0,
        http_client: Optional[HttpClient] = None,
        fetch: Optional[FetchFn] = None,
    ):
        """
        Initialize batch runner.

        Args:
            timeout: Per-fetch timeout in seconds
            max_retries: Retries on timeout/network errors (default none)
            http_client: Shared HTTP client (created per run if not provided)
            fetch: Replacement fetch function url -> HTML (bypasses HTTP)
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.http_client = http_client
        self.fetch = fetch

        # Statistics
        self.stats = {
            "resources_resolved": 0,
            "fetches_failed": 0,
            "items_ok": 0,
            "items_failed": 0,
        }

    def _reset_stats(self) -> None:
        for key in self.stats:
            self.stats[key] = 0

    async def run(
        self,
        config: Configuration,
        params: Params = None,
    ) -> list[ResultItem]:
        """
        Run extraction for every resolved resource.

        Args:
            config: Configuration to run
            params: Shared parameter, list of parameters, or None

        Returns:
            Result items ordered by resource, parameter, selector

        Raises:
            ConfigurationError: If a selector is invalid or resources cannot
                be resolved
        """
        self._reset_stats()

        validate_selectors(config)
        resolved = resolve(config.resources, params)
        self.stats["resources_resolved"] = len(resolved)

        logger.info(
            "starting_batch",
            config=config.name or None,
            resources=len(config.resources),
            resolved=len(resolved),
        )

        if self.fetch is not None:
            items = await self._run_all(config, resolved, self.fetch)
        elif self.http_client is not None:
            items = await self._run_all(config, resolved, self.http_client.fetch_text)
        else:
            async with HttpClient(timeout=self.timeout, max_retries=self.max_retries) as client:
                items = await self._run_all(config, resolved, client.fetch_text)

        for item in items:
            self.stats["items_ok" if item.ok else "items_failed"] += 1

        logger.info("batch_complete", **self.stats)
        return items

    async def _run_all(
        self,
        config: Configuration,
        resolved: list[ResolvedResource],
        fetch: FetchFn,
    ) -> list[ResultItem]:
        """Extract all resources concurrently and restore deterministic order."""
        tasks = [
            asyncio.create_task(
                extract(resource, config.resources[resource.source_index].selectors, fetch)
            )
            for resource in resolved
        ]

        items: list[ResultItem] = []
        try:
            for finished in asyncio.as_completed(tasks):
                resource_items = await finished
                if resource_items and all(
                    item.error is not None and item.error.kind is ErrorKind.FETCH_FAILED
                    for item in resource_items
                ):
                    self.stats["fetches_failed"] += 1
                items.extend(resource_items)
        finally:
            # Abandon in-flight fetches on cancellation or unexpected errors
            for task in tasks:
                task.cancel()

        items.sort(key=lambda item: item.sort_key)
        return items

    async def grab(self, selector: str, url: str) -> ResultItem:
        """
        Extract a single value from a single page.

        Args:
            selector: CSS selector
            url: Page URL (must not contain the placeholder)

        Returns:
            The single ResultItem

        Raises:
            ConfigurationError: If the selector is invalid or url is a template
        """
        config = Configuration(resources=[
            ResourceSpec(url_template=url, selectors=[SelectorSpec(name=selector, selector=selector)]),
        ])

        items = await self.run(config)
        if len(items) != 1:
            raise ConfigurationError(f"Expected one result for {url!r}, got {len(items)}")
        return items[0]
