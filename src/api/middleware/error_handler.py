"""Global exception handlers for the FastAPI application.

Every failure is answered with ``{"error": message}``. The status code comes
from the exception:

- request schema failures (``RequestValidationError``): 400
- :class:`ValidationError` (bad CPF/CNPJ, bad areas): 400
- :class:`NotFoundError`: 404
- Starlette ``HTTPException`` (unknown routes, wrong methods): its own status
- anything else: 500
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.schemas.errors import ErrorResponse
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.context import RequestContext
from src.core.error_context import sanitize_error_context
from src.core.exceptions import BrainAgroError, NotFoundError, ValidationError

PRODUCTION_ERROR_MESSAGE = "Internal server error"
INVALID_JSON_MESSAGE = "Invalid JSON body"


def _settings_for(request: Request) -> Settings:
    settings: Settings | None = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def error_response(status_code: int, message: str) -> ORJSONResponse:
    """Build the ``{"error": message}`` response."""
    return ORJSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def format_validation_error(error: dict[str, Any]) -> str:
    """Render one pydantic error as a client-facing message.

    Args:
        error: An entry of ``RequestValidationError.errors()``.

    Returns:
        str: ``"<field>" is required``, ``"<field>" is not allowed`` or
            ``"<field>": <pydantic message>``; malformed JSON gets a fixed
            message.
    """
    error_type = error.get("type")
    # The location of a decode error is a character offset, not a field
    if error_type == "json_invalid":
        return INVALID_JSON_MESSAGE

    location = [str(part) for part in error.get("loc", ())]
    # Drop the "body"/"query"/"path" prefix unless it is all there is
    field = ".".join(location[1:]) or ".".join(location) or "request"

    if error_type == "missing":
        return f'"{field}" is required'
    if error_type == "extra_forbidden":
        return f'"{field}" is not allowed'
    return f'"{field}": {error.get("msg", "Invalid value")}'


async def brain_agro_error_handler(request: Request, exc: Exception) -> Response:
    """Handle BrainAgroError exceptions.

    Args:
        request: The FastAPI request that caused the exception
        exc: The BrainAgroError exception to handle

    Returns:
        Response: ORJSONResponse with the error message

    Raises:
        TypeError: If exc is not a BrainAgroError instance
    """
    # Type narrowing - we know this handler only receives BrainAgroError
    if not isinstance(exc, BrainAgroError):
        raise TypeError(f"Expected BrainAgroError, got {type(exc).__name__}")

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
            "fingerprint": exc.fingerprint,
        },
    )

    log = logger.warning if exc.is_expected else logger.error
    log(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=status_code,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    return error_response(status_code, exc.message)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Only the first error is reported, as a single message naming the field.

    Args:
        request: The FastAPI request that caused the exception
        exc: The RequestValidationError exception to handle

    Returns:
        Response: ORJSONResponse with status 400

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    # Type narrowing - we know this handler only receives RequestValidationError
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    errors = list(exc.errors())
    message = format_validation_error(errors[0]) if errors else "Invalid request"

    logger.warning(
        "Request validation failed: {}",
        message,
        path=str(request.url.path),
        method=request.method,
        error_count=len(errors),
        status_code=status.HTTP_400_BAD_REQUEST,
        correlation_id=RequestContext.get_correlation_id(),
    )

    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException.

    Args:
        request: The FastAPI request that caused the exception
        exc: The HTTPException to handle

    Returns:
        Response: ORJSONResponse carrying the exception detail and status

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    # Type narrowing - we know this handler only receives HTTPException
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    logger.warning(
        "HTTP exception",
        status=exc.status_code,
        method=request.method,
        path=str(request.url.path),
        detail=exc.detail,
        correlation_id=RequestContext.get_correlation_id(),
    )

    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle generic exceptions.

    In production the client only sees a fixed message; elsewhere it sees
    the exception text (or its type when the text is empty).

    Args:
        request: The FastAPI request that caused the exception
        exc: The unhandled exception

    Returns:
        Response: ORJSONResponse with status 500
    """
    settings = _settings_for(request)

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )

    # Log the full exception with stack trace and sanitized context
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    if settings.environment == "production":
        message = PRODUCTION_ERROR_MESSAGE
    else:
        message = str(exc) or f"Internal Server Error: {type(exc).__name__}"

    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(BrainAgroError, brain_agro_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
