"""Parse raw definition bytes into a :class:`~samroute.models.ParsedDocument`.

Only the parts of a Swagger 2.x / OpenAPI document that matter for mounting
are kept: the ``paths`` object, the operations of the supported HTTP
methods, and the vendor extensions (``x-*`` keys) at path and operation
level. Everything else is ignored; this is not a schema validator.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from samroute.exceptions import DocumentParseError
from samroute.models import HTTPMethod, Operation, ParsedDocument, PathItem

logger = logging.getLogger(__name__)

_EXTENSION_PREFIX = "x-"
_METHODS_BY_NAME = {m.value: m for m in HTTPMethod}


def parse_document(data: bytes) -> ParsedDocument:
    """Parse a JSON (or YAML) definition.

    Args:
        data: Raw definition bytes.

    Returns:
        The structured document. A definition without a ``paths`` key
        yields an empty document.

    Raises:
        DocumentParseError: If the bytes are not a JSON/YAML object or the
            ``paths`` section has the wrong shape.
    """
    raw = _decode(data)
    paths = raw.get("paths")
    if paths is None:
        return ParsedDocument()
    if not isinstance(paths, dict):
        raise DocumentParseError(
            f"Cannot parse swagger definition: 'paths' must be an object, "
            f"got {type(paths).__name__}"
        )

    return ParsedDocument(
        paths={
            str(path): _parse_path_item(str(path), item)
            for path, item in paths.items()
        }
    )


def _decode(data: bytes) -> dict[str, Any]:
    """Decode bytes as JSON, falling back to YAML.

    JSON is tried first because it is the format inline bodies and S3
    definitions normally use; valid JSON is also valid YAML, so the fallback
    only matters for YAML files.
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DocumentParseError(f"Cannot parse swagger definition: {exc}") from exc

    try:
        result = json.loads(text)
    except json.JSONDecodeError as json_error:
        try:
            result = yaml.safe_load(text)
        except yaml.YAMLError as yaml_error:
            raise DocumentParseError(
                "Cannot parse swagger definition as JSON or YAML"
                f"\n  JSON error: {json_error}"
                f"\n  YAML error: {yaml_error}"
            ) from yaml_error
        logger.debug("Definition is not JSON, parsed as YAML")

    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise DocumentParseError(
            f"Cannot parse swagger definition: expected an object (got {kind})"
        )
    return result


def _parse_path_item(path: str, item: Any) -> PathItem:
    """Build a :class:`PathItem`, keeping supported methods and extensions.

    Method names are matched case-insensitively. If a path lists the same
    method twice with different casing, the first one wins.
    """
    if not isinstance(item, dict):
        raise DocumentParseError(
            f"Cannot parse swagger definition: path '{path}' must be an object"
        )

    operations: dict[HTTPMethod, Operation] = {}
    extensions: dict[str, Any] = {}
    for key, value in item.items():
        key = str(key)
        if key.startswith(_EXTENSION_PREFIX):
            extensions[key] = value
            continue
        method = _METHODS_BY_NAME.get(key.lower())
        if method is None or method in operations:
            continue
        operations[method] = _parse_operation(path, key, value)

    return PathItem(operations=operations, extensions=extensions)


def _parse_operation(path: str, method: str, operation: Any) -> Operation:
    if not isinstance(operation, dict):
        raise DocumentParseError(
            f"Cannot parse swagger definition: {method.upper()} {path} "
            "must be an object"
        )
    return Operation(
        extensions={
            str(k): v
            for k, v in operation.items()
            if str(k).startswith(_EXTENSION_PREFIX)
        }
    )
