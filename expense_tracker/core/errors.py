from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger("expense_tracker.errors")

DEFAULT_MESSAGES = {
    status.HTTP_400_BAD_REQUEST: "Bad request",
    status.HTTP_401_UNAUTHORIZED: "Authentication required",
    status.HTTP_403_FORBIDDEN: "Access denied",
    status.HTTP_404_NOT_FOUND: "Resource not found",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "Validation failed",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal server error",
}


def error_body(message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}


def error_response(
    status_code: int,
    message: Optional[str] = None,
    details: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    message = message or DEFAULT_MESSAGES.get(status_code, "Error")
    return JSONResponse(
        status_code=status_code, content=error_body(message, details), headers=headers
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    message = exc.detail if isinstance(exc.detail, str) else None
    # Starlette's stock detail for unknown routes is the bare reason phrase.
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = None
    return error_response(
        exc.status_code, message, headers=getattr(exc, "headers", None)
    )


def _field_name(loc: List[Any]) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    # Request bodies are wrapped as {"user": {...}} / {"expense": {...}}.
    if len(parts) > 1 and parts[0] in ("user", "expense"):
        parts = parts[1:]
    return ".".join(parts) or "body"


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    details: Dict[str, List[str]] = {}
    for err in exc.errors():
        details.setdefault(_field_name(list(err.get("loc", ()))), []).append(
            err.get("msg", "is invalid")
        )
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", details
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    # Sync handlers run in a worker thread where sys.exc_info() is empty.
    logger.error(
        "unhandled %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR)
