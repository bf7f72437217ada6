"""Numeric process exit codes used by the ``gw2api`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~gw2api.exceptions.GW2APIError` subclass.
Shell wrappers can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ gw2api get account
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the API key was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. malformed ids)."""

EXIT_AUTH_FAILURE = 3
"""The API rejected the supplied key (HTTP 401 / 403)."""

EXIT_NOT_FOUND = 4
"""The requested resource or ids were not found."""

EXIT_SERVER_ERROR = 5
"""The API returned an unexpected status or an undecodable body."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
