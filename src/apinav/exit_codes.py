"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apinav.exceptions.ApinavError` subclass.
Scripts wrapping the ``apinav`` CLI can inspect the exit code to tell a
malformed document apart from a missing page without parsing stderr.

Example::

    $ apinav show petstore.json /api_reference/pets/nope
    $ echo $?
    4   # EXIT_NOT_FOUND -- no endpoint maps to that navigable path
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_NOT_FOUND = 4
"""The requested endpoint or navigation page does not exist."""

EXIT_CONNECTION_ERROR = 6
"""The specification document could not be fetched over the network."""

EXIT_SPEC_PARSE_ERROR = 7
"""The specification document is malformed or uses an unsupported dialect."""

EXIT_SLUG_COLLISION = 8
"""Two endpoints map to the same navigable path under the ``error`` policy."""
