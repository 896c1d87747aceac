# student_records/core/handlers.py
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import DBAPIError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from student_records.core.exceptions import BaseAPIException, ServiceUnavailableException
from student_records.core.logging import logger


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": details
            }
        },
    )


# 1. Errors raised on purpose by the service layer
async def custom_api_exception_handler(request: Request, exc: BaseAPIException):
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


# 2. Body validation errors from Pydantic (missing, null or empty fields)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(error["type"] == "json_invalid" for error in errors):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_ERROR",
            "Malformed JSON request body",
            {"body": errors[0]["msg"]},
        )

    details = {}
    for error in errors:
        # Get field name (e.g., "body.email" or just "email")
        field = ".".join(str(x) for x in error["loc"] if x != "body")
        details[field] = error["msg"]

    missing = ", ".join(details) or "request body"
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        f"Invalid or missing fields: {missing}",
        details,
    )


# 3. Standard HTTP errors (unknown URL, wrong method...)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))


# 4. Database errors. A lost connection switches the store to reconnecting.
async def database_exception_handler(request: Request, exc: DBAPIError):
    if exc.connection_invalidated or isinstance(exc, OperationalError):
        logger.error(f"Database operation failed, connection lost: {exc.orig}")
        request.app.state.database.mark_disconnected()
        unavailable = ServiceUnavailableException()
        return error_response(unavailable.status_code, unavailable.code, unavailable.message)
    return await general_exception_handler(request, exc)


# 5. Anything else (bugs, library failures). Details stay in the server log.
async def general_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled Exception: {exc}", exc_info=exc)

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred. Please contact support.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAPIException, custom_api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(DBAPIError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
