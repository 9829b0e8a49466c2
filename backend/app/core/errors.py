"""
Centralized error handling for venue, attendance and chatter failures.

Every failure kind the API can report is a NightlifeError subclass carrying its HTTP status
and user-facing message, so services raise and routes stay thin. The handlers at the bottom
turn them into the {"error": {status, message, details?}} envelope.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_GONE = 410
STATUS_INTERNAL_ERROR = 500
STATUS_BAD_GATEWAY = 502
STATUS_SERVICE_UNAVAILABLE = 503  # provider down, not configured, rate limited
STATUS_GATEWAY_TIMEOUT = 504

MSG_INVALID_LOCATION = "Please specify a location."
MSG_UNAUTHENTICATED = "You are not logged in."
MSG_NOT_ATTENDING = "You have to be attending the venue to post a chatter."
MSG_NO_RESULTS = "No businesses were found near the specified location."
MSG_VENUE_NOT_FOUND = "The venue you requested was not found in our database."
VENUE_NOT_FOUND_DETAILS = [
    "The venue has likely not yet been indexed in our database, yet.",
    "It will be indexed if its details are viewed, or it appears in search results.",
    "The venue may be available at a later date, so try again later.",
]
MSG_NO_CHATTERS = "No chatters were found."
MSG_VENUE_CLOSED = "The business you have requested has closed its doors for good."
MSG_BODY_TOO_LONG = "Chatter comments cannot exceed 140 characters in length."
MSG_UPSTREAM = "An error occurred while polling the Yelp API. Try again later."
MSG_INTERNAL = "Something went wrong. Try again later."


class NightlifeError(Exception):
    """Base for every failure surfaced to API callers."""

    status_code: int = STATUS_INTERNAL_ERROR
    default_message: str = MSG_INTERNAL
    # Expected, user-facing conditions (empty results); never logged as errors
    expected: bool = False

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        details: list[str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_envelope(self) -> dict[str, Any]:
        error: dict[str, Any] = {"status": self.status_code, "message": self.message}
        if self.details:
            error["details"] = list(self.details)
        return {"error": error}


class InvalidQuery(NightlifeError):
    status_code = STATUS_BAD_REQUEST
    default_message = MSG_INVALID_LOCATION


class Unauthenticated(NightlifeError):
    status_code = STATUS_UNAUTHORIZED
    default_message = MSG_UNAUTHENTICATED


class NotAttending(NightlifeError):
    status_code = STATUS_FORBIDDEN
    default_message = MSG_NOT_ATTENDING


class NoResults(NightlifeError):
    status_code = STATUS_NOT_FOUND
    default_message = MSG_NO_RESULTS
    expected = True


class VenueNotFound(NightlifeError):
    status_code = STATUS_NOT_FOUND
    default_message = MSG_VENUE_NOT_FOUND

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("details", VENUE_NOT_FOUND_DETAILS)
        super().__init__(message, **kwargs)


class NoChatters(NightlifeError):
    status_code = STATUS_NOT_FOUND
    default_message = MSG_NO_CHATTERS
    expected = True


class VenueClosed(NightlifeError):
    status_code = STATUS_GONE
    default_message = MSG_VENUE_CLOSED


class BodyTooLong(NightlifeError):
    status_code = STATUS_BAD_REQUEST
    default_message = MSG_BODY_TOO_LONG


class UpstreamUnavailable(NightlifeError):
    status_code = STATUS_SERVICE_UNAVAILABLE
    default_message = MSG_UPSTREAM


class InternalFailure(NightlifeError):
    status_code = STATUS_INTERNAL_ERROR
    default_message = MSG_INTERNAL


# ---------------------------------------------------------------------------
# FastAPI handlers
# ---------------------------------------------------------------------------


async def nightlife_error_handler(request: Request, exc: NightlifeError) -> JSONResponse:
    if isinstance(exc, InternalFailure):
        logger.error("Internal failure on %s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
        exc = InternalFailure()
    elif exc.expected:
        logger.debug("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    else:
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()]
    err = InvalidQuery("The request was malformed.", details=details)
    return JSONResponse(status_code=err.status_code, content=err.to_envelope())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Store/infra failures: full context server-side, generic message to the caller
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = InternalFailure()
    return JSONResponse(status_code=err.status_code, content=err.to_envelope())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NightlifeError, nightlife_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, unhandled_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
