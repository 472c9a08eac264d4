"""Exceptions for Google Calendar API operations.

Exception hierarchy::

    CalendarAPIError           (base; carries the HTTP status code)
    +-- CalendarAuthError      (authentication / 401 failures)

Calls are never retried; :func:`classify_http_error` only turns the
client library's ``HttpError`` into one of the above.
"""

from __future__ import annotations

from googleapiclient.errors import HttpError


class CalendarAPIError(Exception):
    """Base exception for Google Calendar API errors.

    Attributes:
        status_code: HTTP status code from the API, or ``None`` if the
            error did not originate from an HTTP response.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CalendarAuthError(CalendarAPIError):
    """Raised when Calendar API authentication fails (401, missing secrets)."""

    def __init__(self, message: str = "Calendar authentication failed") -> None:
        super().__init__(message, status_code=401)


def classify_http_error(error: HttpError) -> CalendarAPIError:
    """Map an ``HttpError`` to the matching calendar exception.

    Args:
        error: The ``googleapiclient.errors.HttpError`` to classify.

    Returns:
        :class:`CalendarAuthError` for 401, otherwise a
        :class:`CalendarAPIError` carrying the status code.
    """
    status = error.resp.status

    if status == 401:
        return CalendarAuthError(str(error))
    return CalendarAPIError(str(error), status_code=status)
