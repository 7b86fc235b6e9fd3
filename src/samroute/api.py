"""Resolve the route mounts of serverless APIs.

:func:`resolve_mounts` is the entry point the routing layer calls. It runs
the definition pipeline for one API resource::

    select_source -> read_definition -> parse_document -> extract_mounts

Every call starts from the source definition; nothing is cached between
calls, so resolving several APIs concurrently needs no locking. Errors from
reading or parsing the definition propagate unchanged; problems with a
single route's integration never do (see :mod:`samroute.definition.mounts`).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

from samroute.definition import (
    extract_mounts,
    parse_document,
    read_definition,
    select_source,
)
from samroute.models import MountDescriptor, ServerlessApi, Settings
from samroute.template import load_template, serverless_apis

logger = logging.getLogger(__name__)


def resolve_mounts(
    api: ServerlessApi,
    settings: Optional[Settings] = None,
    s3_client: Any = None,
) -> list[MountDescriptor]:
    """Return the mounts declared by *api*'s definition.

    Args:
        api: The serverless API resource.
        settings: Used to build the S3 client for S3-hosted definitions.
        s3_client: Optional pre-built S3 client.

    Returns:
        One mount per mounted (path, method) pair.

    Raises:
        NoDefinitionFoundError: If the API has no definition source.
        DefinitionIOError: If the definition cannot be read.
        RemoteFetchError: If the S3 request fails.
        SerializationError: If an inline mapping cannot be encoded.
        DocumentParseError: If the definition is not a structured document.

    Example::

        api = ServerlessApi(logical_id="Api", DefinitionUri="swagger.json")
        for mount in resolve_mounts(api):
            print(mount.method, mount.path, mount.handler_reference)
    """
    source = select_source(api)
    logger.debug("Resolving mounts for %s from %s", api.logical_id, source.kind)
    data = read_definition(source, settings=settings, s3_client=s3_client)
    document = parse_document(data)
    return extract_mounts(document)


def resolve_template_mounts(
    template_path: Union[str, Path],
    settings: Optional[Settings] = None,
    s3_client: Any = None,
) -> dict[str, list[MountDescriptor]]:
    """Resolve every ``AWS::Serverless::Api`` in a template file.

    Relative definition paths are resolved against the template's directory.

    Returns:
        Mounts keyed by API logical id, in logical-id order.
    """
    path = Path(template_path)
    template = load_template(path)
    return {
        api.logical_id: resolve_mounts(api, settings=settings, s3_client=s3_client)
        for api in serverless_apis(template, base_dir=path.parent)
    }
