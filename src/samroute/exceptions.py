"""Exception hierarchy for samroute.

All exceptions inherit from :class:`SamrouteError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`samroute.exit_codes`.
The top-level error handler in :func:`samroute.app.main` catches
``SamrouteError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SamrouteError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- RemoteFetchError         (exit 6)
    +-- NoDefinitionFoundError   (exit 7)
    +-- DefinitionIOError        (exit 8)
    +-- SerializationError       (exit 9)
    +-- DocumentParseError       (exit 10)
    +-- TemplateError            (exit 11)
    +-- IntegrationError         (exit 1)
    +-- ConfigError              (exit 1)

Everything except :class:`IntegrationError` is fatal to a resolution.
``IntegrationError`` is always caught inside the mount extractor, logged,
and turned into a mount with an empty handler reference.
"""

from samroute.exit_codes import (
    EXIT_DEFINITION_IO_ERROR,
    EXIT_DOCUMENT_PARSE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NO_DEFINITION,
    EXIT_REMOTE_FETCH_ERROR,
    EXIT_SERIALIZATION_ERROR,
    EXIT_TEMPLATE_ERROR,
)


class SamrouteError(Exception):
    """Base exception for all samroute errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`samroute.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SamrouteError):
    """Raised for invalid CLI arguments, e.g. an unknown ``--api`` logical id."""

    exit_code = EXIT_INVALID_USAGE


class NoDefinitionFoundError(SamrouteError):
    """Raised when an API resource declares neither a DefinitionUri nor a DefinitionBody."""

    exit_code = EXIT_NO_DEFINITION


class DefinitionIOError(SamrouteError):
    """Raised when definition bytes cannot be read from disk or from a remote body."""

    exit_code = EXIT_DEFINITION_IO_ERROR


class RemoteFetchError(SamrouteError):
    """Raised when the object-storage request for a definition fails.

    The message always names the ``bucket/key`` that was requested.
    """

    exit_code = EXIT_REMOTE_FETCH_ERROR


class SerializationError(SamrouteError):
    """Raised when an inline definition mapping cannot be encoded as JSON."""

    exit_code = EXIT_SERIALIZATION_ERROR


class DocumentParseError(SamrouteError):
    """Raised when the definition bytes are not a structured API document."""

    exit_code = EXIT_DOCUMENT_PARSE_ERROR


class TemplateError(SamrouteError):
    """Raised when a SAM template cannot be loaded or is malformed."""

    exit_code = EXIT_TEMPLATE_ERROR


class IntegrationError(SamrouteError):
    """Raised when no handler reference can be extracted from an integration."""


class ConfigError(SamrouteError):
    """Raised for configuration problems (invalid project file, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
