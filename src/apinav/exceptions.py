"""Exception hierarchy for apinav.

All exceptions inherit from :class:`ApinavError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apinav.exit_codes`.
Library callers catch ``ApinavError`` (or one of its subclasses); the
CLI entry point in :func:`apinav.app.main` turns it into a process exit code.

Only structural problems with the top-level document are fatal.  Broken or
circular ``$ref`` pointers are recovered locally by the resolver and never
surface as exceptions.

Subclass hierarchy::

    ApinavError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- ConnectionError_    (exit 6)
    +-- SpecParseError      (exit 7)
    +-- SlugCollisionError  (exit 8)
    +-- ConfigError         (exit 1)
"""

from apinav.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SLUG_COLLISION,
    EXIT_SPEC_PARSE_ERROR,
)


class ApinavError(Exception):
    """Base exception for all apinav errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apinav.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApinavError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(ApinavError):
    """Raised when a navigable path or operation id matches no endpoint."""

    exit_code = EXIT_NOT_FOUND


class ConnectionError_(ApinavError):
    """Raised when a remote specification document cannot be fetched.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(ApinavError):
    """Raised when a document is malformed or lacks a supported dialect marker."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SlugCollisionError(ApinavError):
    """Raised when two endpoints share a navigable path under the ``error`` policy.

    Args:
        path: The navigable path claimed by more than one endpoint.
        endpoints: ``"METHOD /path"`` labels of the colliding endpoints, in
            document order.
    """

    exit_code = EXIT_SLUG_COLLISION

    def __init__(self, path: str, endpoints: list[str]):
        self.path = path
        self.endpoints = endpoints
        super().__init__(
            f"Navigable path '{path}' is claimed by {len(endpoints)} endpoints: "
            + ", ".join(endpoints)
        )


class ConfigError(ApinavError):
    """Raised for configuration problems (invalid JSON, bad override values)."""

    exit_code = EXIT_GENERIC_FAILURE
