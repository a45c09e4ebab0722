"""Error normalizer: the single boundary that turns failures into responses.

Operational errors keep their message and status. Store/input errors are
translated to 400s. Anything else is logged and replaced by a generic 500.
Outside production the API shape also carries the raw error and stack.
Requests outside ``/api`` get the page shape ``{"title", "msg"}``.
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.config import get_settings
from src.errors import AppError, CastError, DuplicateKeyError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went very wrong!"
PAGE_TITLE = "Something went wrong"


def to_app_error(exc: Exception) -> AppError | None:
    """Translate a known failure into an operational error, or None if unclassified."""
    if isinstance(exc, AppError):
        return exc if exc.is_operational else None
    if isinstance(exc, CastError):
        return AppError(f"Invalid {exc.path}: {exc.value}.", status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, DuplicateKeyError):
        return AppError(
            f"Duplicate field value: {exc.value}. Please use another value",
            status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, ValidationError):
        return AppError(
            f"Invalid input data. {'. '.join(exc.messages)}", status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, StarletteHTTPException):
        return AppError(str(exc.detail), exc.status_code)
    return None


def from_request_validation(exc: RequestValidationError) -> Exception:
    """Path/query type errors become CastError, everything else ValidationError."""
    errors = exc.errors()
    for error in errors:
        loc = error.get("loc", ())
        if loc and loc[0] in ("path", "query") and error.get("type", "").endswith(
            ("_parsing", "_type")
        ):
            return CastError(str(loc[-1]), error.get("input"))

    messages = []
    for error in errors:
        message = error.get("msg", "Invalid value").removeprefix("Value error, ")
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        messages.append(f"{field}: {message}" if field else message)
    return ValidationError(messages)


def build_response(request: Request, exc: Exception) -> JSONResponse:
    """Render ``exc`` in the shape the request and environment call for."""
    settings = get_settings()
    error = to_app_error(exc)

    if error is None:
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc!r}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        client_message = GENERIC_MESSAGE
        body_status = "error"
    else:
        status_code = error.status_code
        client_message = error.message
        body_status = error.status
        if status_code >= 500:
            logger.error(f"{type(error).__name__} on {request.url.path}: {error.message}")
        else:
            logger.info(f"{status_code} on {request.url.path}: {error.message}")

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None

    if not request.url.path.startswith("/api"):
        return JSONResponse(
            status_code=status_code,
            content={"title": PAGE_TITLE, "msg": client_message},
            headers=headers,
        )

    content = {"status": body_status, "message": client_message}
    if not settings.is_production:
        content["error"] = {"type": type(exc).__name__, "detail": str(exc)}
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def handle_app_error(request: Request, exc: Exception) -> JSONResponse:
    return build_response(request, exc)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return build_response(request, from_request_validation(exc))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        exc = AppError(f"Can't find {request.url.path} on this server!", exc.status_code)
    return build_response(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the normalizer on ``app``."""
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(CastError, handle_app_error)
    app.add_exception_handler(DuplicateKeyError, handle_app_error)
    app.add_exception_handler(ValidationError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_app_error)
