"""
Resolution of URL templates into concrete resources.

A template containing the placeholder (%%) is expanded once per
parameter; a template without it is always resolved exactly once.
"""

from collections.abc import Sequence
from typing import Optional, Union

import structlog

from .exceptions import ConfigurationError
from .models import URL_PARAM_PLACEHOLDER, ResolvedResource, ResourceSpec

logger = structlog.get_logger(__name__)

Params = Union[str, Sequence[str], None]


def substitute(template: str, param: str) -> str:
    """Replace every placeholder in template with param."""
    return template.replace(URL_PARAM_PLACEHOLDER, param)


def resolve(
    resources: Sequence[ResourceSpec],
    params: Params = None,
) -> list[ResolvedResource]:
    """
    Expand resource templates against parameters.

    Modes:
    - params=None (or empty list): templates must not contain the placeholder
    - params="x" (one-param): every placeholder template gets "x"
    - params=["a", "b"]: every placeholder template is expanded per
      parameter, resource order outer and parameter order inner

    Args:
        resources: Ordered resource specs
        params: Single shared parameter, list of parameters, or None

    Returns:
        Ordered list of ResolvedResource

    Raises:
        ConfigurationError: If a template contains the placeholder but no
            parameter was supplied
    """
    if isinstance(params, str):
        param_list = [params]
    else:
        param_list = list(params or [])

    if not param_list:
        unresolved = [i for i, r in enumerate(resources) if r.needs_parameter]
        if unresolved:
            positions = ", ".join(str(i + 1) for i in unresolved)
            raise ConfigurationError(
                f"Resource(s) {positions} contain the {URL_PARAM_PLACEHOLDER!r} "
                "placeholder but no parameters were given"
            )

    resolved = []
    for source_index, resource in enumerate(resources):
        if not resource.needs_parameter:
            resolved.append(ResolvedResource(
                url=resource.url_template,
                source_index=source_index,
            ))
            continue

        for param_index, param in enumerate(param_list):
            resolved.append(ResolvedResource(
                url=substitute(resource.url_template, param),
                source_index=source_index,
                param_index=param_index,
                param=param,
            ))

    logger.debug(
        "resources_resolved",
        resources=len(resources),
        params=len(param_list),
        resolved=len(resolved),
    )
    return resolved
