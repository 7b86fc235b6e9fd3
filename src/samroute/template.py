"""Load SAM templates and find their ``AWS::Serverless::Api`` resources.

Templates are read as JSON or YAML. YAML templates routinely use the
CloudFormation short-form intrinsics (``!Sub``, ``!GetAtt``, ``!Ref``, ...),
which a plain ``yaml.safe_load`` rejects; :class:`_TemplateLoader` turns
each of them into its long mapping form so that ``!Sub "x"`` loads as
``{"Fn::Sub": "x"}``, exactly like the JSON version of the template.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from samroute.exceptions import InvalidUsageError, TemplateError
from samroute.models import ServerlessApi

logger = logging.getLogger(__name__)

SERVERLESS_API_TYPE = "AWS::Serverless::Api"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _TemplateLoader(yaml.SafeLoader):
    """SafeLoader that understands CloudFormation short-form intrinsic tags.

    Unquoted dates such as ``version: 2017-04-20`` stay strings, as they do
    in the JSON form of a template.
    """


_TemplateLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_intrinsic(
    loader: _TemplateLoader, tag_suffix: str, node: yaml.Node
) -> dict[str, Any]:
    name = "Ref" if tag_suffix == "Ref" else f"Fn::{tag_suffix}"

    value: Any
    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
        # !GetAtt Resource.Attribute is shorthand for [Resource, Attribute]
        if tag_suffix == "GetAtt":
            value = value.split(".", 1)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return {name: value}


_TemplateLoader.add_multi_constructor("!", _construct_intrinsic)


def parse_template(content: str, source: str = "<template>") -> dict[str, Any]:
    """Parse template text as JSON, falling back to YAML.

    Args:
        content: The raw template text.
        source: Name used in error messages.

    Returns:
        The template as a dictionary.

    Raises:
        TemplateError: If the content is neither a JSON nor a YAML object.
    """
    try:
        result = json.loads(content)
    except json.JSONDecodeError:
        try:
            result = yaml.load(content, Loader=_TemplateLoader)  # noqa: S506
        except yaml.YAMLError as exc:
            raise TemplateError(f"Cannot parse template {source}: {exc}") from exc

    if not isinstance(result, dict):
        raise TemplateError(
            f"Template {source} must be an object "
            f"(got {type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def load_template(path: Union[str, Path]) -> dict[str, Any]:
    """Read and parse a template file.

    Raises:
        TemplateError: If the file is missing, unreadable, or malformed.
    """
    template_path = Path(path)
    if not template_path.is_file():
        raise TemplateError(f"Template file not found: {path}")
    try:
        content = template_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateError(f"Failed to read template {path}: {exc}") from exc
    return parse_template(content, source=str(path))


def serverless_apis(
    template: dict[str, Any], base_dir: Optional[Union[str, Path]] = None
) -> list[ServerlessApi]:
    """Return every ``AWS::Serverless::Api`` resource of *template*.

    Args:
        template: A parsed template.
        base_dir: Directory that relative ``DefinitionUri`` paths are
            resolved against, normally the template's own directory.

    Returns:
        The API resources, sorted by logical id.

    Raises:
        TemplateError: If ``Resources`` is not a mapping or an API
            resource has definition properties of the wrong type.
    """
    resources = template.get("Resources", {})
    if not isinstance(resources, dict):
        raise TemplateError("Template 'Resources' must be an object")

    apis: list[ServerlessApi] = []
    for logical_id in sorted(resources):
        resource = resources[logical_id]
        if not isinstance(resource, dict) or resource.get("Type") != SERVERLESS_API_TYPE:
            continue

        properties = resource.get("Properties") or {}
        if not isinstance(properties, dict):
            raise TemplateError(f"Properties of '{logical_id}' must be an object")

        try:
            api = ServerlessApi.model_validate(
                {
                    "logical_id": logical_id,
                    "DefinitionUri": properties.get("DefinitionUri"),
                    "DefinitionBody": properties.get("DefinitionBody"),
                    "base_dir": str(base_dir) if base_dir is not None else None,
                }
            )
        except ValidationError as exc:
            raise TemplateError(
                f"Invalid definition properties on '{logical_id}': {exc}"
            ) from exc
        apis.append(api)

    logger.debug("Found %d serverless APIs in template", len(apis))
    return apis


def find_api(apis: list[ServerlessApi], logical_id: str) -> ServerlessApi:
    """Return the API with *logical_id*.

    Raises:
        InvalidUsageError: If no API has that logical id.
    """
    for api in apis:
        if api.logical_id == logical_id:
            return api
    available = ", ".join(api.logical_id for api in apis) or "none"
    raise InvalidUsageError(
        f"No {SERVERLESS_API_TYPE} named '{logical_id}' (available: {available})"
    )
