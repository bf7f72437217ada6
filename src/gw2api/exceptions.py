"""Exception hierarchy for gw2api.

All exceptions inherit from :class:`GW2APIError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`gw2api.exit_codes`.
The CLI entry point in :func:`gw2api.app.main` catches ``GW2APIError`` and
exits with the appropriate code; library callers can catch the base class
or any of the specific subclasses.

Subclass hierarchy::

    GW2APIError (exit 1)
    +-- InvalidArgumentError    (exit 2)
    +-- UpstreamError           (exit 3, 4 or 5 depending on status)
    +-- MalformedResponseError  (exit 5)
    +-- TransportError          (exit 6)
    +-- MissingIdsError         (exit 4)
    +-- ConfigError             (exit 1)
"""

from __future__ import annotations

import json
from typing import Any

from gw2api.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)

_BODY_EXCERPT = 200


class GW2APIError(Exception):
    """Base exception for all gw2api errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidArgumentError(GW2APIError):
    """Raised when an id argument is neither an identifier nor a sequence of identifiers."""

    exit_code = EXIT_INVALID_USAGE


class UpstreamError(GW2APIError):
    """Raised when the API answers with a status other than 200 or 206.

    The exit code follows the status: 401/403 map to an auth failure, 404
    to not-found, everything else to a server error.

    Attributes:
        status_code: The HTTP status returned by the API.
        body: The raw, undecoded response body.
    """

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        if status_code in (401, 403):
            code = EXIT_AUTH_FAILURE
        elif status_code == 404:
            code = EXIT_NOT_FOUND
        else:
            code = EXIT_SERVER_ERROR
        detail = _error_text(body)
        message = f"HTTP {status_code}: {detail}" if detail else f"HTTP {status_code}"
        super().__init__(message, exit_code=code)


class MalformedResponseError(GW2APIError):
    """Raised when a response body is not valid JSON.

    Attributes:
        body: The offending raw body, kept for diagnosis.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, body: str):
        self.body = body
        super().__init__(f"Error parsing JSON response: {body[:_BODY_EXCERPT]}")


class TransportError(GW2APIError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class MissingIdsError(GW2APIError):
    """Raised when the API omits requested ids from a successful response.

    The objects that could be resolved are not lost: ``partial`` holds them
    in the caller's requested order, so callers that tolerate gaps can
    catch this error and keep going.

    Attributes:
        missing: Requested ids the API did not return, in ascending order.
        partial: Resolved objects in requested order (duplicates kept).
    """

    exit_code = EXIT_NOT_FOUND

    def __init__(self, missing: list[Any], partial: list[Any]):
        self.missing = missing
        self.partial = partial
        ids = ", ".join(str(i) for i in missing)
        super().__init__(f"Ids not returned by the API: {ids}")


class ConfigError(GW2APIError):
    """Raised for configuration problems (invalid JSON, bad values in file or env)."""

    exit_code = EXIT_GENERIC_FAILURE


def _error_text(body: str) -> str:
    """Pull the ``text`` field out of a GW2 error body, else an excerpt of the raw body."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body[:_BODY_EXCERPT] if body else ""
    if isinstance(payload, dict) and payload.get("text"):
        return str(payload["text"])
    return body[:_BODY_EXCERPT]
