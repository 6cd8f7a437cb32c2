import logging
import time
from contextvars import ContextVar

from sqlalchemy import event
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

# Request bodies larger than this are truncated in error records.
MAX_CAPTURED_BODY = 64 * 1024

# ---------------------------------------------------------------------------
# Per-request context variables
# ---------------------------------------------------------------------------

query_count_var: ContextVar[int] = ContextVar("query_count", default=0)
request_body_var: ContextVar[bytearray | None] = ContextVar("request_body", default=None)


def install_query_counter(engine) -> None:
    """
    Register a ``before_cursor_execute`` event listener on *engine* that
    increments the per-request ``query_count_var`` for every SQL statement,
    including the ones SQLAlchemy issues internally for eager loads.

    Must be called once per engine (production engine in ``database.py``,
    test engine in ``conftest.py``).
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _count_query(conn, cursor, statement, parameters, context, executemany):
        query_count_var.set(query_count_var.get() + 1)


def captured_request_body() -> bytes:
    """Return the body bytes read so far by the current request."""
    buffer = request_body_var.get()
    return bytes(buffer) if buffer else b""


# ---------------------------------------------------------------------------
# Middleware (pure ASGI; BaseHTTPMiddleware would isolate the ContextVars)
# ---------------------------------------------------------------------------

class RequestContextMiddleware:
    """
    Pure ASGI middleware that

    - resets the SQL query counter and starts a wall-clock timer,
    - tees the request body into ``request_body_var`` (bounded by
      ``MAX_CAPTURED_BODY``) so the error boundary can record it,
    - adds ``X-Response-Time-Ms`` and ``X-Query-Count`` response headers,
    - logs one line per request at debug level.

    No child task is spawned for the inner application, so ``ContextVar``
    mutations made downstream are visible here and in the exception
    handlers.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        query_count_var.set(0)
        body = bytearray()
        request_body_var.set(body)
        start = time.perf_counter()
        status_holder: dict[str, int] = {}

        async def receive_wrapper() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                chunk = message.get("body", b"")
                room = MAX_CAPTURED_BODY - len(body)
                if chunk and room > 0:
                    body.extend(chunk[:room])
            return message

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                status_holder["status"] = message["status"]
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                headers = list(message.get("headers", []))
                headers.append((b"x-response-time-ms", str(duration_ms).encode()))
                headers.append((b"x-query-count", str(query_count_var.get()).encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        finally:
            logger.debug(
                "%s %s -> %s in %.2fms (%d queries)",
                scope.get("method"),
                scope.get("path"),
                status_holder.get("status", 500),
                (time.perf_counter() - start) * 1000,
                query_count_var.get(),
            )
