"""Console logging, per-request access lines and slow statement warnings."""
import importlib.util
import logging
import time
from logging.config import dictConfig
from typing import Any, Dict

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings

# Routes and exception handlers set this on error responses
ERROR_KIND_HEADER = "X-Error-Kind"

_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def _console_formatter() -> Dict[str, Any]:
    if importlib.util.find_spec("colorlog") is None:
        return {"format": _FORMAT}
    return {
        "()": "colorlog.ColoredFormatter",
        "format": "%(log_color)s" + _FORMAT,
        "log_colors": _LOG_COLORS,
    }


def build_logging_config() -> Dict[str, Any]:
    level = settings.LOG_LEVEL.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"console": _console_formatter()},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "level": settings.CONSOLE_LOG_LEVEL.upper(),
            },
        },
        "loggers": {
            # The request middleware already writes one line per request
            "uvicorn.access": {"level": "WARNING"},
            "uvicorn.error": {"level": "WARNING"},
            # Statement echo stays off; slow statements come from setup_query_logging
            "sqlalchemy.engine": {"level": "WARNING"},
            "string_analyzer": {"level": level, "handlers": ["console"], "propagate": False},
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def init_logging() -> None:
    dictConfig(build_logging_config())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line per request: method, path, status class, error kind, duration.

    Server errors log at ERROR, client errors at WARNING, the rest at INFO.
    """

    async def dispatch(self, request: Request, call_next):
        logger = logging.getLogger("string_analyzer.request")
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        status = response.status_code
        status_class = f"{status // 100}xx"
        kind = response.headers.get(ERROR_KIND_HEADER)
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            "%s %s -> %s %s%s (%.2f ms)",
            request.method,
            request.url.path,
            status,
            status_class,
            f" kind={kind}" if kind else "",
            elapsed_ms,
        )
        return response


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    context._query_start_time = time.perf_counter()


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    started = getattr(context, "_query_start_time", None)
    if started is None:
        return
    elapsed_ms = (time.perf_counter() - started) * 1000
    if elapsed_ms > settings.SLOW_QUERY_THRESHOLD_MS:
        logging.getLogger("string_analyzer.db").warning("Slow query (%.2f ms): %s", elapsed_ms, statement)


def setup_query_logging(engine: Engine) -> None:
    """Warn about statements slower than ``settings.SLOW_QUERY_THRESHOLD_MS``.

    Safe to call more than once for the same engine.
    """
    if event.contains(engine, "before_cursor_execute", _before_cursor_execute):
        return
    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine, "after_cursor_execute", _after_cursor_execute)
