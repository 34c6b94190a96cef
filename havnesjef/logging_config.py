from __future__ import annotations

import logging
import os
import re
import sys

LOG_LEVEL_ENV = "HAVNESJEF_LOG_LEVEL"
ACCESS_LOG_LEVEL_ENV = "HAVNESJEF_ACCESS_LOG_LEVEL"

# Loggers uvicorn creates for itself; with log_config=None they keep no handlers
# of their own and are routed through the root handler installed here.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

REDACTED = "[redacted]"
# Service account tokens are JWTs; kubeconfig text carries them as `token: ...`.
_JWT_RE = re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+")
_TOKEN_FIELD_RE = re.compile(r"(\"?token\"?\s*[:=]\s*\"?)[^\s\",}]+", re.IGNORECASE)

_COLORS = {
    logging.DEBUG: "\x1b[36m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[1;31m",
}


def redact_tokens(text: str) -> str:
    return _TOKEN_FIELD_RE.sub(rf"\g<1>{REDACTED}", _JWT_RE.sub(REDACTED, text))


class TokenRedactingFilter(logging.Filter):
    """Keep bearer tokens out of log output, whichever module logs them."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_tokens(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class _TeamFormatter(logging.Formatter):
    def __init__(self, *, use_color: bool) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self._use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        color = _COLORS.get(record.levelno) if self._use_color else None
        if color is None:
            return line
        return line.replace(record.levelname, f"{color}{record.levelname}\x1b[0m", 1)


def resolve_level(level: str | int | None, *, env: str = LOG_LEVEL_ENV, default: int = logging.INFO) -> int:
    if isinstance(level, int):
        return level
    candidate = level or os.getenv(env)
    if not candidate:
        return default
    resolved = logging.getLevelName(candidate.upper())
    return resolved if isinstance(resolved, int) else default


def configure_logging(*, level: str | int | None = None, force: bool = False) -> logging.Handler:
    """Send the service's and uvicorn's logs to one redacting stderr handler.

    The access log level defaults to the main level and can be set separately
    through ``HAVNESJEF_ACCESS_LOG_LEVEL``. Repeated calls reuse the installed
    handler unless ``force`` is set.
    """
    root = logging.getLogger()
    resolved = resolve_level(level)
    root.setLevel(resolved)

    handler = next((h for h in root.handlers if getattr(h, "_havnesjef", False)), None)
    if handler is None or force:
        for existing in [h for h in root.handlers if getattr(h, "_havnesjef", False)]:
            root.removeHandler(existing)
        stream = sys.stderr
        handler = logging.StreamHandler(stream)
        handler._havnesjef = True  # type: ignore[attr-defined]
        handler.setFormatter(
            _TeamFormatter(use_color=not os.getenv("NO_COLOR") and hasattr(stream, "isatty") and stream.isatty())
        )
        handler.addFilter(TokenRedactingFilter())
        root.addHandler(handler)
    handler.setLevel(logging.NOTSET)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
        server_logger.setLevel(resolved)
    logging.getLogger("uvicorn.access").setLevel(
        resolve_level(None, env=ACCESS_LOG_LEVEL_ENV, default=resolved)
    )
    logging.getLogger("havnesjef").setLevel(resolved)
    return handler
