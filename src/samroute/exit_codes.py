"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~samroute.exceptions.SamrouteError` subclass.
External tooling (CI scripts, shell wrappers) can inspect the exit code to
determine which resolution stage failed without parsing stderr.

Example::

    $ samroute mounts template.yaml
    $ echo $?
    7   # EXIT_NO_DEFINITION -- the API resource has no definition source
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_REMOTE_FETCH_ERROR = 6
"""The definition could not be fetched from object storage."""

EXIT_NO_DEFINITION = 7
"""The API resource does not declare any definition source."""

EXIT_DEFINITION_IO_ERROR = 8
"""The definition bytes could not be read (local file or remote body)."""

EXIT_SERIALIZATION_ERROR = 9
"""An inline definition mapping could not be serialised to JSON."""

EXIT_DOCUMENT_PARSE_ERROR = 10
"""The definition could not be parsed as a structured API document."""

EXIT_TEMPLATE_ERROR = 11
"""The SAM template could not be read or does not have the expected shape."""
