"""
Exception boundary: every error leaving a route becomes the uniform body

    {statusCode, timestamp, path, method, error, message}

and is handed to the error recorder on ``app.state.error_logger``.
Unknown exceptions never leak detail to the client; the full context,
with credentials redacted, only goes to the recorder.
"""
import logging
import traceback
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DataError, IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.error_log import decode_body, sanitize_body
from app.exceptions import AppError
from app.middleware import captured_request_body

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _record(request: Request, exc: Exception, status: int, message) -> None:
    recorder = getattr(request.app.state, "error_logger", None)
    if recorder is None:
        return
    event = {
        "timestamp": _timestamp(),
        "method": request.method,
        "url": str(request.url),
        "status": status,
        "message": message if isinstance(message, str) else str(message),
        "ip": request.client.host if request.client else None,
        "userAgent": request.headers.get("user-agent"),
        "userId": getattr(request.state, "user_id", None) or "anonymous",
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        "body": sanitize_body(decode_body(captured_request_body())),
        "query": dict(request.query_params),
        "params": dict(request.path_params),
    }
    try:
        recorder.record(event)
    except Exception:  # pragma: no cover - recorder must never mask the response
        logger.exception("Error recorder failed")


def error_response(
    request: Request,
    exc: Exception,
    status: int,
    error: str,
    message,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = {
        "statusCode": status,
        "timestamp": _timestamp(),
        "path": request.url.path,
        "method": request.method,
        "error": error,
        "message": message,
    }
    _record(request, exc, status, message)
    return JSONResponse(status_code=status, content=body, headers=headers)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return error_response(request, exc, exc.status_code, exc.error, exc.message, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = HTTPStatus(exc.status_code).phrase
    return error_response(request, exc, exc.status_code, error, exc.detail, exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"] if part not in ("body", "query", "path"))
        messages.append(f"{field}: {err['msg']}" if field else err["msg"])
    return error_response(request, exc, 400, "Bad Request", messages)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return error_response(
        request, exc, 429, "Too Many Requests", f"Rate limit exceeded: {exc.detail}"
    )


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "foreign key" in text or "foreignkey" in text


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    if _is_foreign_key_violation(exc):
        message = "Referenced record does not exist"
    else:
        message = "A record with this value already exists"
    return error_response(request, exc, 400, "Database Error", message)


async def no_result_handler(request: Request, exc: NoResultFound) -> JSONResponse:
    return error_response(
        request, exc, 404, "Database Error", "The requested record was not found"
    )


async def data_error_handler(request: Request, exc: DataError) -> JSONResponse:
    return error_response(request, exc, 400, "Validation Error", "Invalid data format provided")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(
        request, exc, 500, "Internal Server Error", "An unexpected error occurred"
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(NoResultFound, no_result_handler)
    app.add_exception_handler(DataError, data_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
