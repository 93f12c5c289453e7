"""Translate exceptions into JSON error responses.

Business errors keep their message and details. Anything unexpected is
logged with request context and answered with a generic message.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, InvalidOperationError, ObjectNotFoundError, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.errors import ConcurrentModification, StorefrontError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    body = {"success": False, "code": code, "message": message}
    if details:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=body)


async def handle_storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
    log = logger.warning if exc.status_code >= 500 else logger.info
    log("request_rejected", path=request.url.path, code=exc.code, status_code=exc.status_code)
    return _error(exc.status_code, exc.code, exc.message, exc.details)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, "invalid_request", "Validation error", {"errors": exc.errors()})


async def handle_domain_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, "invalid_request", "Validation error", {"errors": exc.messages})


async def handle_object_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error(404, "not_found", str(exc) or "Resource not found")


async def handle_invalid_operation(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return _error(400, "invalid_operation", str(exc))


async def handle_version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    conflict = ConcurrentModification()
    logger.warning("concurrent_modification", path=request.url.path, error=str(exc))
    return _error(conflict.status_code, conflict.code, conflict.message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "code": "http_error", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, method=request.method, error=str(exc))
    return _error(500, "internal_error", "Something went wrong. Please try again later.")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, handle_storefront_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(ValidationError, handle_domain_validation_error)
    app.add_exception_handler(ObjectNotFoundError, handle_object_not_found)
    app.add_exception_handler(InvalidOperationError, handle_invalid_operation)
    app.add_exception_handler(ExpectedVersionError, handle_version_conflict)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
