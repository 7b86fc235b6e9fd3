"""API definition pipeline -- locate, read, parse, and extract mounts.

This sub-package turns the definition of an ``AWS::Serverless::Api``
resource into the list of :class:`~samroute.models.MountDescriptor` a local
router registers.

Typical usage::

    from samroute.definition import (
        extract_mounts,
        parse_document,
        read_definition,
        select_source,
    )

    source = select_source(api)
    document = parse_document(read_definition(source))
    mounts = extract_mounts(document)

Sub-modules:

* :mod:`~samroute.definition.sources` -- source selection (fixed precedence)
  and per-variant readers.
* :mod:`~samroute.definition.storage` -- S3 download through boto3.
* :mod:`~samroute.definition.document` -- JSON/YAML decoding into a
  :class:`~samroute.models.ParsedDocument`.
* :mod:`~samroute.definition.integration` -- integration extension decoding
  and handler extraction.
* :mod:`~samroute.definition.mounts` -- the two-phase mount extractor.
"""

from samroute.definition.document import parse_document
from samroute.definition.mounts import extract_mounts
from samroute.definition.sources import read_definition, select_source

__all__ = ["select_source", "read_definition", "parse_document", "extract_mounts"]
