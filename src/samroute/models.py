"""Canonical Pydantic models shared across all samroute modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Input models** -- the SAM side of the pipeline:
    :class:`S3Location`, :class:`ServerlessApi`, and the four
    :data:`DefinitionSource` variants (:class:`LocalFileURI`,
    :class:`RemoteObjectLocation`, :class:`InlineText`,
    :class:`InlineStructure`).

**Document models** -- produced by the definition parser and consumed by the
mount extractor:
    :class:`HTTPMethod`, :class:`Operation`, :class:`PathItem`,
    :class:`ParsedDocument`, :class:`ApiGatewayIntegration`, and
    :class:`ApiGatewayAnyMethod`.

**Output and configuration models**:
    :class:`MountDescriptor` and :class:`Settings`.

All models use Pydantic v2. Models that mirror AWS payloads use
``populate_by_name`` so they accept both the AWS field names and the
snake_case attribute names.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


INTEGRATION_EXTENSION = "x-amazon-apigateway-integration"
"""Operation-level extension naming the backend integration."""

ANY_METHOD_EXTENSION = "x-amazon-apigateway-any-method"
"""Path-level extension routing every unmapped method to one integration."""


# --- SAM input models ---


class S3Location(BaseModel):
    """The object form of ``AWS::Serverless::Api.DefinitionUri``.

    Accepts the SAM property names (``Bucket``, ``Key``, ``Version``) as
    well as the attribute names. ``Version`` is normalised to a string; an
    absent version becomes ``""`` which selects the latest object version.
    """

    model_config = ConfigDict(populate_by_name=True)

    bucket: str = Field(alias="Bucket")
    key: str = Field(alias="Key")
    version: str = Field(default="", alias="Version")

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


class ServerlessApi(BaseModel):
    """An ``AWS::Serverless::Api`` resource, reduced to its definition fields.

    ``definition_uri`` is either a path string or an :class:`S3Location`;
    ``definition_body`` is either a JSON string or a decoded mapping. Relative
    local paths are resolved against ``base_dir`` (normally the directory of
    the template that declared the resource).

    Example::

        ServerlessApi(
            logical_id="PetsApi",
            DefinitionUri={"Bucket": "artifacts", "Key": "swagger.json"},
        )
    """

    model_config = ConfigDict(populate_by_name=True)

    logical_id: str = "ServerlessRestApi"
    definition_uri: Optional[Union[str, S3Location]] = Field(
        default=None, alias="DefinitionUri"
    )
    definition_body: Optional[Union[str, dict[str, Any]]] = Field(
        default=None, alias="DefinitionBody"
    )
    base_dir: Optional[str] = Field(
        default=None, description="Directory relative DefinitionUri paths resolve against"
    )


# --- Definition sources ---


class LocalFileURI(BaseModel):
    """Definition stored in a file on the local filesystem."""

    kind: Literal["local_file"] = "local_file"
    path: str


class RemoteObjectLocation(BaseModel):
    """Definition stored in S3. ``version`` may be empty (latest)."""

    kind: Literal["remote_object"] = "remote_object"
    bucket: str
    key: str
    version: str = ""


class InlineText(BaseModel):
    """Definition supplied verbatim as text."""

    kind: Literal["inline_text"] = "inline_text"
    text: str


class InlineStructure(BaseModel):
    """Definition supplied as a decoded mapping (e.g. YAML in the template)."""

    kind: Literal["inline_structure"] = "inline_structure"
    document: dict[str, Any]


DefinitionSource = Annotated[
    Union[LocalFileURI, RemoteObjectLocation, InlineText, InlineStructure],
    Field(discriminator="kind"),
]
"""Tagged union of the four places a definition can come from."""


# --- Document models ---


class HTTPMethod(str, enum.Enum):
    """The fixed set of HTTP methods that can be mounted.

    Iteration order is the order mounts are emitted in for a single path.
    Any other verb present in a document (``trace``, custom verbs) is never
    considered.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    HEAD = "head"
    OPTIONS = "options"


class Operation(BaseModel):
    """A single operation under a path item.

    Only vendor extensions are kept; everything else in the operation
    object (parameters, responses, ...) is irrelevant to mounting.
    """

    extensions: dict[str, Any] = Field(default_factory=dict)


class PathItem(BaseModel):
    """Operations and path-level extensions for one route template."""

    operations: dict[HTTPMethod, Operation] = Field(default_factory=dict)
    extensions: dict[str, Any] = Field(default_factory=dict)


class ParsedDocument(BaseModel):
    """Structured form of a Swagger/OpenAPI definition.

    Path strings are kept exactly as written in the document, path
    parameters included.
    """

    paths: dict[str, PathItem] = Field(default_factory=dict)


class ApiGatewayIntegration(BaseModel):
    """Payload of the ``x-amazon-apigateway-integration`` extension.

    ``uri`` is either a plain string or a CloudFormation intrinsic such as
    ``{"Fn::Sub": "arn:aws:apigateway:...:function:${MyFn.Arn}/invocations"}``.
    Fields samroute does not use are preserved in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uri: Optional[Union[str, dict[str, Any]]] = None
    type: Optional[str] = None
    http_method: Optional[str] = Field(default=None, alias="httpMethod")
    passthrough_behavior: Optional[str] = Field(
        default=None, alias="passthroughBehavior"
    )


class ApiGatewayAnyMethod(BaseModel):
    """Payload of the path-level ``x-amazon-apigateway-any-method`` extension."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    integration: Any = Field(default=None, alias=INTEGRATION_EXTENSION)


# --- Output models ---


class MountDescriptor(BaseModel):
    """One (path, method, handler) binding handed to the routing layer.

    ``handler_reference`` is empty when no handler could be resolved; the
    mount is still emitted so the router can report a dispatch error for it.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    method: str
    handler_reference: str = ""


# --- Configuration ---


class Settings(BaseModel):
    """Effective runtime configuration, see :func:`samroute.config.resolve_settings`."""

    aws_profile: Optional[str] = Field(
        default=None, description="Named AWS profile used for S3 definitions"
    )
    aws_region: Optional[str] = Field(
        default=None, description="Region for the S3 client"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None, description="Alternative S3 endpoint (e.g. a local emulator)"
    )
    output_format: str = Field(
        default="auto", description="Default output format: auto, json, plain, rich"
    )
