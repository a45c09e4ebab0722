"""Application error taxonomy.

``AppError`` subclasses are operational: their message is safe to show to the
client and the error normalizer returns it verbatim with ``status_code``.
``ValidationError``, ``DuplicateKeyError`` and ``CastError`` come from the
store/input layer and are translated into client-safe 400 responses.
Anything else is treated as an internal fault.
"""

from fastapi import status


class AppError(Exception):
    """Base class for operational errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Something went wrong"
    is_operational: bool = True

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    @property
    def status(self) -> str:
        """``fail`` for client errors, ``error`` for server errors."""
        return "fail" if 400 <= self.status_code < 500 else "error"


# Authentication (401)


class NotAuthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "You are not logged in! Please log in to get access."


class InvalidTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid token. Please log in again!"


class ExpiredTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Your token has expired! Please log in again."


class UserGoneError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "The user belonging to this token does no longer exist."


class StalePasswordError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "User recently changed password! Please log in again."


class IncorrectCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect email or password"


class WrongPasswordError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Your current password is wrong."


# Authorization (403)


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You do not have permission to perform this action"


# Lookups and requests


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "No document found with that ID"


class UserNotFoundError(NotFoundError):
    message = "There is no user with this email address."


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"


class InvalidOrExpiredTokenError(BadRequestError):
    message = "Token is invalid or has expired"


class DeliveryError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "There was an error sending the email. Try again later!"


# Store/input layer


class ValidationError(Exception):
    """One or more field values failed validation."""

    def __init__(self, messages: list[str]) -> None:
        self.messages = messages
        super().__init__("; ".join(messages))


class DuplicateKeyError(Exception):
    """A unique index rejected a write."""

    def __init__(self, field: str, value: object = None) -> None:
        self.field = field
        self.value = value
        super().__init__(f"duplicate value for {field}: {value}")


class CastError(Exception):
    """A path or query value could not be converted to the expected type."""

    def __init__(self, path: str, value: object) -> None:
        self.path = path
        self.value = value
        super().__init__(f"cannot cast {path}={value!r}")
