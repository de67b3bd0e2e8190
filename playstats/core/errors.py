"""Error taxonomy for snapshot reads.

The HTTP layer maps these to a failed ``{success: false, error}`` envelope,
using ``status_code`` for the response status and ``str(exc)`` verbatim as
the message.
"""

from fastapi import status


class StatsError(Exception):
    """Base error for a failed statistics computation."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.message = message
        self.path = path


class StoreUnavailable(StatsError):
    """The backing store read raised or returned a non-success response."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class MalformedInput(StatsError):
    """A snapshot did not have the shape of a collection."""

    status_code = status.HTTP_502_BAD_GATEWAY
