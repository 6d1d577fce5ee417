"""
Exception handlers that map domain exceptions to HTTP responses.

Every failure leaves the API as a JSON body with an ``error`` message.
"""
import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from nlq_dashboard.core.exceptions import (
    DomainException,
    NotFoundError,
    ValidationError,
    OperationError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Log validation errors and reject the request as a bad request."""
    logger.error(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Strip non-serializable context (e.g. exception instances) from pydantic errors."""
    cleaned = []
    for error in exc.errors():
        cleaned.append({
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        })
    return cleaned


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """
    Handle all domain exceptions and map to appropriate HTTP status codes.

    Services can raise domain exceptions without knowing about HTTP.
    """
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, ServiceUnavailableError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, OperationError):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        logger.error(f"Operation error: {exc.message}", extra={"details": exc.details})
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        logger.error(f"Unhandled domain exception: {exc.message}", extra={"details": exc.details})

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.message,
            "error_type": exc.__class__.__name__,
            **exc.details,
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: any other failure becomes a 500 with its message."""
    logger.exception(f"Error handling {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc) or exc.__class__.__name__},
    )


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI app.

    Call this function right after creating the app instance.
    """
    # Handler for base DomainException catches all subclasses
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
