"""samroute -- resolve API Gateway route mounts from SAM templates.

This package reads the Swagger/OpenAPI definition of an
``AWS::Serverless::Api`` resource (from a local file, S3, or inline in the
template) and turns its ``x-amazon-apigateway-integration`` and
``x-amazon-apigateway-any-method`` extensions into route mounts that a local
router can register without talking to API Gateway.

Typical usage::

    from samroute import ServerlessApi, resolve_mounts

    api = ServerlessApi(logical_id="Api", DefinitionUri="swagger.json")
    for mount in resolve_mounts(api):
        print(mount.method, mount.path, mount.handler_reference)

Modules:
    api: Resolution entry points.
    definition: Source selection, reading, parsing, and mount extraction.
    template: SAM template loading.
    models: Pydantic models shared across the entire package.
    config: Settings resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    app: Typer CLI.
"""

__version__ = "0.1.0"

from samroute.api import resolve_mounts, resolve_template_mounts  # noqa: E402
from samroute.models import MountDescriptor, ServerlessApi  # noqa: E402

__all__ = [
    "__version__",
    "resolve_mounts",
    "resolve_template_mounts",
    "MountDescriptor",
    "ServerlessApi",
]
