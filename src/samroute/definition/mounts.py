"""Turn a parsed definition into route mounts.

Each path is processed in two phases:

1. :func:`map_explicit_methods` -- every supported method whose operation
   carries ``x-amazon-apigateway-integration`` becomes a mount.
   Operations without the extension produce nothing.
2. :func:`fill_any_method` -- if the path carries
   ``x-amazon-apigateway-any-method``, every supported method *not* mapped
   in phase 1 becomes a mount pointing at the wildcard integration.

An explicit mapping therefore always wins over the wildcard, and no
``(path, method)`` pair is emitted twice. Paths are walked in sorted order
and methods in :class:`~samroute.models.HTTPMethod` order, so the output is
deterministic for a given document.
"""

from __future__ import annotations

import logging
from typing import Optional

from samroute.definition.integration import (
    function_name,
    parse_any_method,
    parse_integration,
)
from samroute.exceptions import IntegrationError
from samroute.models import (
    ANY_METHOD_EXTENSION,
    INTEGRATION_EXTENSION,
    ApiGatewayIntegration,
    HTTPMethod,
    MountDescriptor,
    ParsedDocument,
    PathItem,
)

logger = logging.getLogger(__name__)


def extract_mounts(document: ParsedDocument) -> list[MountDescriptor]:
    """Extract the mounts of every path in *document*.

    Args:
        document: The parsed definition.

    Returns:
        Mounts ordered by path, then by method order within a path.
        Explicit mounts for a path come before its wildcard mounts.
    """
    mounts: list[MountDescriptor] = []
    for path in sorted(document.paths):
        item = document.paths[path]
        explicit, mapped = map_explicit_methods(path, item)
        mounts.extend(explicit)
        mounts.extend(fill_any_method(path, item, mapped))

    logger.debug(
        "Extracted %d mounts from %d paths", len(mounts), len(document.paths)
    )
    return mounts


def map_explicit_methods(
    path: str, item: PathItem
) -> tuple[list[MountDescriptor], set[HTTPMethod]]:
    """Mount the methods that declare their own integration.

    Returns:
        The mounts created, and the set of methods they cover.
    """
    mounts: list[MountDescriptor] = []
    mapped: set[HTTPMethod] = set()

    for method in HTTPMethod:
        operation = item.operations.get(method)
        if operation is None or operation.extensions.get(INTEGRATION_EXTENSION) is None:
            continue

        integration = parse_integration(operation.extensions[INTEGRATION_EXTENSION])
        mounts.append(create_mount(path, method, integration))
        mapped.add(method)

    return mounts, mapped


def fill_any_method(
    path: str, item: PathItem, mapped: set[HTTPMethod]
) -> list[MountDescriptor]:
    """Mount every method not in *mapped* through the any-method integration.

    Returns an empty list when the path has no any-method extension, or
    when the extension cannot be decoded.
    """
    if ANY_METHOD_EXTENSION not in item.extensions:
        return []

    any_method = parse_any_method(item.extensions[ANY_METHOD_EXTENSION])
    if any_method is None:
        logger.warning("Skipping any-method mounts for %s", path)
        return []

    integration = None
    if any_method.integration is not None:
        integration = parse_integration(any_method.integration)
    return [
        create_mount(path, method, integration)
        for method in HTTPMethod
        if method not in mapped
    ]


def create_mount(
    path: str,
    method: HTTPMethod,
    integration: Optional[ApiGatewayIntegration],
) -> MountDescriptor:
    """Build a mount, leaving the handler empty if it cannot be resolved."""
    handler = ""
    if integration is None:
        logger.warning("No integration defined for %s %s", method.name, path)
    else:
        try:
            handler = function_name(integration)
        except IntegrationError as exc:
            logger.warning(
                "Could not extract Lambda function for %s %s: %s",
                method.name,
                path,
                exc,
            )

    return MountDescriptor(
        name=path,
        path=path,
        method=method.value,
        handler_reference=handler,
    )
