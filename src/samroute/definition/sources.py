"""Locate and read the raw definition of a serverless API.

A ``AWS::Serverless::Api`` resource can carry its Swagger/OpenAPI
definition in one of four ways. :func:`select_source` turns the resource
into exactly one :data:`~samroute.models.DefinitionSource` variant and
:func:`read_definition` returns the raw bytes for it.

Selection is a fixed, ordered check -- the first populated source wins:

1. ``DefinitionUri`` as a string (a local path, or an ``s3://`` URI)
2. ``DefinitionUri`` as an S3 location object
3. ``DefinitionBody`` as a string
4. ``DefinitionBody`` as a mapping

Reading is a strategy dispatch on the variant type (:data:`_READERS`).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from samroute.definition.storage import fetch_object
from samroute.exceptions import (
    DefinitionIOError,
    NoDefinitionFoundError,
    SerializationError,
)
from samroute.models import (
    DefinitionSource,
    InlineStructure,
    InlineText,
    LocalFileURI,
    RemoteObjectLocation,
    S3Location,
    ServerlessApi,
    Settings,
)

logger = logging.getLogger(__name__)

_S3_SCHEME = "s3://"


def select_source(api: ServerlessApi) -> DefinitionSource:
    """Pick the definition source of *api* using the fixed precedence order.

    Args:
        api: The serverless API resource.

    Returns:
        The first populated source variant.

    Raises:
        NoDefinitionFoundError: If neither ``DefinitionUri`` nor
            ``DefinitionBody`` holds a usable value.
    """
    uri = api.definition_uri
    if isinstance(uri, str):
        if uri.startswith(_S3_SCHEME):
            return _parse_s3_uri(uri)
        return LocalFileURI(path=_resolve_local_path(uri, api.base_dir))

    if isinstance(uri, S3Location):
        return RemoteObjectLocation(
            bucket=uri.bucket, key=uri.key, version=uri.version
        )

    body = api.definition_body
    if isinstance(body, str):
        return InlineText(text=body)

    if isinstance(body, dict):
        return InlineStructure(document=body)

    raise NoDefinitionFoundError(
        f"No swagger definition found for API '{api.logical_id}'"
    )


def _resolve_local_path(uri: str, base_dir: Optional[str]) -> str:
    """Resolve a relative definition path against the template directory."""
    path = Path(uri).expanduser()
    if base_dir and not path.is_absolute():
        path = Path(base_dir) / path
    return str(path)


def _parse_s3_uri(uri: str) -> RemoteObjectLocation:
    """Split ``s3://bucket/key`` into a :class:`RemoteObjectLocation`.

    A missing key leaves it empty; the S3 request then fails with a
    :class:`~samroute.exceptions.RemoteFetchError` naming the bucket.
    """
    bucket, _, key = uri[len(_S3_SCHEME):].partition("/")
    return RemoteObjectLocation(bucket=bucket, key=key)


def read_definition(
    source: DefinitionSource,
    settings: Optional[Settings] = None,
    s3_client: Any = None,
) -> bytes:
    """Return the raw definition bytes for *source*.

    Args:
        source: One of the four definition-source variants.
        settings: Settings used to build an S3 client for remote sources.
        s3_client: Optional pre-built S3 client for remote sources.

    Returns:
        The definition as bytes (JSON, or YAML for local files).

    Raises:
        DefinitionIOError: If a local file or remote body cannot be read.
        RemoteFetchError: If the S3 request fails.
        SerializationError: If an inline mapping is not JSON-serialisable.
    """
    reader = _READERS[type(source)]
    logger.debug("Reading definition from %s source", source.kind)
    return reader(source, settings, s3_client)


def _read_local_file(
    source: LocalFileURI, settings: Optional[Settings], s3_client: Any
) -> bytes:
    try:
        return Path(source.path).read_bytes()
    except OSError as exc:
        raise DefinitionIOError(
            f"Cannot read local swagger definition ({source.path}): {exc}"
        ) from exc


def _read_remote_object(
    source: RemoteObjectLocation, settings: Optional[Settings], s3_client: Any
) -> bytes:
    return fetch_object(source, client=s3_client, settings=settings)


def _read_inline_text(
    source: InlineText, settings: Optional[Settings], s3_client: Any
) -> bytes:
    return source.text.encode("utf-8")


def _read_inline_structure(
    source: InlineStructure, settings: Optional[Settings], s3_client: Any
) -> bytes:
    try:
        text = json.dumps(
            source.document,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Cannot serialise inline swagger definition to JSON: {exc}"
        ) from exc
    return text.encode("utf-8")


_READERS: dict[type, Callable[[Any, Optional[Settings], Any], bytes]] = {
    LocalFileURI: _read_local_file,
    RemoteObjectLocation: _read_remote_object,
    InlineText: _read_inline_text,
    InlineStructure: _read_inline_structure,
}
