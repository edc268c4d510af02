"""
Centralized error handling for domain and API failures.
Domain errors are raised by services; routes and the app-level handler map them to HTTP
through the tables below so status codes live in one place.
"""
from __future__ import annotations

from typing import Callable

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

MSG_AI_QUOTA_EXCEEDED = "AI service quota exceeded. Try again later."
MSG_INTERNAL = "Internal server error."

STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500
STATUS_SERVICE_UNAVAILABLE = 503  # quota, rate limit, provider down


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------


class GymAppError(Exception):
    """Base class for every error a service raises on purpose."""

    status_code = STATUS_INTERNAL_ERROR
    default_message = MSG_INTERNAL

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(GymAppError):
    status_code = STATUS_BAD_REQUEST
    default_message = "Invalid input."


class InvalidTransition(GymAppError):
    status_code = STATUS_BAD_REQUEST
    default_message = "Booking status change not allowed."


class NotAvailable(GymAppError):
    status_code = STATUS_BAD_REQUEST
    default_message = "Trainer is not available at the requested time."


class SubscriptionRequired(GymAppError):
    status_code = STATUS_BAD_REQUEST
    default_message = "You must have an active subscription to book a session."


class BookingLimitReached(GymAppError):
    status_code = STATUS_BAD_REQUEST
    default_message = "Monthly booking limit for your subscription reached."


class BalanceExceeded(GymAppError):
    status_code = STATUS_BAD_REQUEST
    default_message = "Insufficient balance. Please pay outstanding fees."


class DuplicateBooking(GymAppError):
    status_code = STATUS_BAD_REQUEST
    default_message = "You have already booked this session."


class AuthenticationError(GymAppError):
    status_code = STATUS_UNAUTHORIZED
    default_message = "Invalid or expired token."


class Forbidden(GymAppError):
    status_code = STATUS_FORBIDDEN
    default_message = "Access denied."


class NotFound(GymAppError):
    status_code = STATUS_NOT_FOUND
    default_message = "Not found."


class Internal(GymAppError):
    status_code = STATUS_INTERNAL_ERROR


# ---------------------------------------------------------------------------
# Error rules for collaborator failures: (predicate, status_code, detail_message)
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

def _is_quota_error(msg: str) -> bool:
    lower = msg.lower()
    return (
        "429" in msg
        or "insufficient_quota" in lower
        or "quota" in lower
        or "rate limit" in lower
    )


# List of (predicate, status_code, detail). First match wins.
COLLABORATOR_ERROR_RULES: list[tuple[Callable[[str], bool], int, str]] = [
    (_is_quota_error, STATUS_SERVICE_UNAVAILABLE, MSG_AI_QUOTA_EXCEEDED),
]


def error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception into an HTTPException.
    GymAppError subclasses carry their own status; other exceptions go through
    COLLABORATOR_ERROR_RULES and otherwise become a 500 with the exception message.
    """
    if isinstance(exc, GymAppError):
        return HTTPException(status_code=exc.status_code, detail=exc.message)
    msg = str(exc)
    for predicate, status_code, detail in COLLABORATOR_ERROR_RULES:
        if predicate(msg):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=msg or MSG_INTERNAL)
