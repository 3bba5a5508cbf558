"""
Error taxonomy for the booking and matching services.

Every service failure that can reach a caller is one of these. Each carries
an HTTP status and a short machine-readable reason, so routes stay thin and
no store-specific detail leaks past the API boundary.
"""
from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500


class BookingError(Exception):
    status_code = STATUS_INTERNAL_ERROR
    default_reason = "internal_error"

    def __init__(self, reason: str | None = None):
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class ValidationError(BookingError):
    status_code = STATUS_BAD_REQUEST
    default_reason = "invalid_request"


class SlotFullError(ValidationError):
    default_reason = "event_full"


class EmptyGroupError(BookingError):
    status_code = STATUS_BAD_REQUEST
    default_reason = "no_bookings_for_event"


class AuthError(BookingError):
    status_code = STATUS_UNAUTHORIZED
    default_reason = "unauthorized"


class NotFoundError(BookingError):
    status_code = STATUS_NOT_FOUND
    default_reason = "not_found"


class PersistenceError(BookingError):
    status_code = STATUS_INTERNAL_ERROR
    default_reason = "persistence_error"


class ConfigurationError(BookingError):
    status_code = STATUS_INTERNAL_ERROR
    default_reason = "server_configuration_error"


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= STATUS_INTERNAL_ERROR:
        logger.error(f"{request.method} {request.url.path} failed: {exc.reason}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.reason})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=STATUS_BAD_REQUEST, content={"detail": "invalid_request"})
