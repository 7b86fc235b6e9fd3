"""Fetch definition bytes from S3.

A thin wrapper around a boto3 S3 client. The client is built from the
effective :class:`~samroute.models.Settings` (profile, region, endpoint)
unless the caller passes one in, which is how tests inject a client wrapped
in :class:`botocore.stub.Stubber`.

No retry or timeout policy is added on top of botocore's own defaults;
callers that need more resilience wrap :func:`fetch_object` themselves.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from samroute.exceptions import DefinitionIOError, RemoteFetchError
from samroute.models import RemoteObjectLocation, Settings

logger = logging.getLogger(__name__)


def create_s3_client(settings: Optional[Settings] = None) -> Any:
    """Create an S3 client honouring the profile/region/endpoint settings."""
    settings = settings or Settings()
    session = boto3.session.Session(
        profile_name=settings.aws_profile,
        region_name=settings.aws_region,
    )
    return session.client("s3", endpoint_url=settings.s3_endpoint_url)


def fetch_object(
    location: RemoteObjectLocation,
    client: Any = None,
    settings: Optional[Settings] = None,
) -> bytes:
    """Download an object and return its fully buffered body.

    ``VersionId`` is always sent, even when empty, so the request shape is
    the same for versioned and unversioned definitions.

    Args:
        location: Bucket, key and version of the definition.
        client: Optional pre-built S3 client.
        settings: Used to build a client when *client* is ``None``.

    Returns:
        The raw object bytes.

    Raises:
        RemoteFetchError: If the GetObject request fails.
        DefinitionIOError: If the response body cannot be read completely.
    """
    object_name = f"{location.bucket}/{location.key}"
    try:
        if client is None:
            client = create_s3_client(settings)
        logger.debug(
            "Fetching definition s3://%s (version=%r)", object_name, location.version
        )
        response = client.get_object(
            Bucket=location.bucket,
            Key=location.key,
            VersionId=location.version,
        )
    except (BotoCoreError, ClientError) as exc:
        raise RemoteFetchError(
            f"Error while fetching definition from S3: {object_name}\n{exc}"
        ) from exc

    body = response["Body"]
    try:
        return body.read()
    except (BotoCoreError, OSError) as exc:
        raise DefinitionIOError(
            f"Cannot read S3 definition object body ({object_name}): {exc}"
        ) from exc
    finally:
        body.close()
