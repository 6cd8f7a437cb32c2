"""
Error recorder used by the exception boundary.

The boundary only depends on ``record(event)``; the default implementation
appends JSON lines to a dated file and mirrors each event on the
``app.errors`` logger.  Tests swap in a recorder of their own through
``app.state.error_logger``.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger("app.errors")

REDACTED = "[REDACTED]"
SENSITIVE_KEYS = frozenset({"password", "passwordHash", "token", "refresh_token", "access_token"})


class ErrorRecorder(Protocol):
    def record(self, event: dict[str, Any]) -> None: ...


def sanitize_body(body: Any) -> Any:
    """Return a shallow copy of *body* with credential fields redacted."""
    if not isinstance(body, dict):
        return body
    return {key: REDACTED if key in SENSITIVE_KEYS else value for key, value in body.items()}


def decode_body(raw: bytes) -> Any:
    """Best-effort decode of a captured request body for logging."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw.decode("utf-8", errors="replace")


class ErrorLogger:
    """Append-only JSON-lines error log, one file per UTC day."""

    def __init__(self, log_dir: str | Path) -> None:
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, when: datetime) -> Path:
        return self.log_dir / f"errors-{when.date().isoformat()}.log"

    def record(self, event: dict[str, Any]) -> None:
        status = event.get("status", 500)
        line = json.dumps(event, default=str)
        if status >= 500:
            logger.error(line)
        else:
            logger.warning(line)

        try:
            with self.path_for(datetime.now(timezone.utc)).open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as exc:
            logger.error("Failed to write error log to file: %s", exc)
