"""Decode API Gateway integration extensions and find the handler they invoke.

Lambda proxy integrations point at their function through the integration
``uri``::

    arn:aws:apigateway:us-east-1:lambda:path/2015-03-31/functions/<function-arn>/invocations

In SAM templates the function ARN is usually a substitution, either inside
a plain string or an ``Fn::Sub`` intrinsic::

    {"Fn::Sub": "arn:aws:apigateway:${AWS::Region}:lambda:path/2015-03-31/functions/${ListUsers.Arn}/invocations"}

:func:`function_arn` returns the ``<function-arn>`` part and
:func:`function_name` reduces it to the name the local router dispatches on
(``ListUsers`` above).

Decoding is lenient on purpose: :func:`parse_integration` and
:func:`parse_any_method` log a warning and return ``None`` for payloads of
the wrong shape, so one broken route never aborts the whole mount table.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from samroute.exceptions import IntegrationError
from samroute.models import ApiGatewayAnyMethod, ApiGatewayIntegration

logger = logging.getLogger(__name__)

_FUNCTIONS_MARKER = "functions/"
_INVOCATIONS_SUFFIX = "/invocations"
_FUNCTION_ARN_MARKER = ":function:"
_ARN_ATTRIBUTE = ".Arn"
_SUB_INTRINSIC = "Fn::Sub"


def parse_integration(payload: Any) -> Optional[ApiGatewayIntegration]:
    """Decode an ``x-amazon-apigateway-integration`` payload.

    Returns:
        The typed integration, or ``None`` (with a warning logged) when the
        payload is not an integration object.
    """
    try:
        return ApiGatewayIntegration.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "Could not parse integration settings: %s", _summarise(exc)
        )
        return None


def parse_any_method(payload: Any) -> Optional[ApiGatewayAnyMethod]:
    """Decode an ``x-amazon-apigateway-any-method`` payload.

    Returns:
        The typed wrapper, or ``None`` (with a warning logged) when the
        payload is not an object.
    """
    try:
        return ApiGatewayAnyMethod.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "Could not parse any-method extension: %s", _summarise(exc)
        )
        return None


def function_arn(integration: ApiGatewayIntegration) -> str:
    """Return the function ARN embedded in the integration ``uri``.

    Args:
        integration: A decoded integration.

    Returns:
        Everything between ``functions/`` and ``/invocations``, which may
        still contain ``${...}`` substitutions.

    Raises:
        IntegrationError: If the integration has no ``uri``, the ``uri``
            is an unsupported intrinsic, or it does not follow the Lambda
            invocation ARN format.
    """
    uri = _uri_template(integration.uri)

    start = uri.find(_FUNCTIONS_MARKER)
    end = uri.rfind(_INVOCATIONS_SUFFIX)
    if start < 0 or end < 0:
        raise IntegrationError(f"Integration uri is not a Lambda invocation: {uri}")

    start += len(_FUNCTIONS_MARKER)
    if end <= start:
        raise IntegrationError(f"Integration uri has no function ARN: {uri}")
    return uri[start:end]


def function_name(integration: ApiGatewayIntegration) -> str:
    """Return the handler reference for *integration*.

    ``${Fn.Arn}`` and ``${Fn}`` become ``Fn``; a literal Lambda ARN becomes
    its function name, without any alias or version qualifier. Anything
    else is returned as found in the uri.

    Raises:
        IntegrationError: Propagated from :func:`function_arn`.
    """
    return _reduce_function_ref(function_arn(integration))


def _uri_template(uri: Any) -> str:
    """Return the string form of a plain or ``Fn::Sub`` uri."""
    if uri is None:
        raise IntegrationError("Integration has no uri")
    if isinstance(uri, str):
        return uri

    if set(uri) == {_SUB_INTRINSIC}:
        value = uri[_SUB_INTRINSIC]
        # Fn::Sub also takes [template, variables]
        if isinstance(value, list) and value:
            value = value[0]
        if isinstance(value, str):
            return value

    raise IntegrationError(
        f"Unsupported intrinsic in integration uri: {', '.join(map(str, uri))}"
    )


def _reduce_function_ref(ref: str) -> str:
    if ref.startswith("${"):
        end = ref.find("}")
        if end > 2:
            name = ref[2:end]
            if name.endswith(_ARN_ATTRIBUTE):
                name = name[: -len(_ARN_ATTRIBUTE)]
            return name

    if _FUNCTION_ARN_MARKER in ref:
        name = ref.split(_FUNCTION_ARN_MARKER, 1)[1]
        if name.startswith("${"):
            return _reduce_function_ref(name)
        return name.split(":", 1)[0]

    return ref


def _summarise(exc: ValidationError) -> str:
    """One-line description of the first validation problem."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "payload"
    return f"{location}: {first['msg']}"
