"""
Error taxonomy and the JSON error envelope.

Every error leaving the API has the shape:
    {"error": {"message": "...", "code": "...", "status_code": 403}}
Validation errors additionally carry "details": [{"field": ..., "message": ...}].
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config.settings import settings

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "Internal server error"


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"
    default_message = GENERIC_SERVER_MESSAGE

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)
        self.details = details


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_ERROR"
    default_message = "Authentication required"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "AUTHORIZATION_ERROR"
    default_message = "Insufficient permissions"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class ServerError(AppError):
    pass


_CODES_BY_STATUS = {
    400: ValidationError.code,
    401: Unauthorized.code,
    403: Forbidden.code,
    404: NotFound.code,
    429: "RATE_LIMIT_ERROR",
}


def error_envelope(message: str, status_code: int, code: Optional[str] = None, details=None) -> Dict[str, Any]:
    body = {
        "message": message or GENERIC_SERVER_MESSAGE,
        "code": code or _CODES_BY_STATUS.get(status_code, "INTERNAL_ERROR"),
        "status_code": status_code,
    }
    if details:
        body["details"] = details
    return {"error": body}


async def http_exception_handler(request: Request, exc: HTTPException):
    code = getattr(exc, "code", None)
    details = getattr(exc, "details", None)
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, message)
        if settings.is_production:
            message = GENERIC_SERVER_MESSAGE
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message, exc.status_code, code, details),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope("Validation failed", 400, ValidationError.code, details),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    message = GENERIC_SERVER_MESSAGE if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content=error_envelope(message, 500))
