"""Exception hierarchy shared by the client layers."""

from __future__ import annotations

from typing import Optional

CONNECTION_ERROR_MESSAGE = (
    "Cannot connect to server. Please check your internet connection."
)
TIMEOUT_ERROR_MESSAGE = "Request timeout. Please try again."


class ImproperlyConfigured(Exception):
    """Raised when a required setting is missing or malformed."""


class BookingAppError(Exception):
    """Base class for every error the client surfaces to a UI layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingAppError):
    """Local, field-level validation failure. Never reaches the network."""

    def __init__(self, errors: dict[str, str], message: str | None = None):
        self.errors = dict(errors)
        super().__init__(
            message or "Please fill all required fields correctly"
        )


class StorageError(BookingAppError):
    """The session store could not persist or remove a value."""


class ApiError(BookingAppError):
    """Normalized failure of a call to the booking backend."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[dict] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}

    @property
    def recoverable(self) -> bool:
        return False


class NetworkError(ApiError):
    """No response was received from the server."""

    def __init__(self, message: str = CONNECTION_ERROR_MESSAGE):
        super().__init__(message)

    @property
    def recoverable(self) -> bool:
        return True


class RequestTimeoutError(NetworkError):
    def __init__(self, message: str = TIMEOUT_ERROR_MESSAGE):
        super().__init__(message)


class ServerError(ApiError):
    """The server answered with an error payload."""


class AuthorizationError(ServerError):
    """The bearer token is missing, expired or invalid."""


class NotAvailableError(BookingAppError):
    """The package cannot be booked for the requested dates."""


class PaymentGatewayError(BookingAppError):
    """A structured failure reported by the Razorpay checkout widget."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.reason = reason


class FlowStateError(BookingAppError):
    """An operation was invoked in a state that does not allow it."""
