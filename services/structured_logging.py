"""
Structured JSON Logging
========================
One logging setup shared by the Flask app and the ``casefile`` CLI.

Outside production the root logger writes plain
``time [LEVEL] logger: message`` lines. In production every record becomes
one JSON object per line, stamped with the time the record was created:

    {"timestamp": ..., "level": ..., "logger": ..., "message": ...,
     "request_id": ..., "method": ..., "path": ...,      # inside a request
     "exception": ...}                                    # with exc_info

Every HTTP request gets a hex ``request_id`` on ``flask.g``; it is echoed
in the ``X-Request-ID`` response header and the request's duration is
logged on ``casefile.http`` when the response leaves.
"""

import json
import logging
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, g, has_request_context, request

HTTP_LOGGER = "casefile.http"
REQUEST_ID_HEADER = "X-Request-ID"

_PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_PLAIN_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _request_fields() -> Dict[str, Any]:
    if not has_request_context():
        return {}
    return {
        "request_id": g.get("request_id"),
        "method": request.method,
        "path": request.path,
    }


class _JSONFormatter(logging.Formatter):
    """Render a LogRecord as a single line of JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_request_fields())
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", *, json_lines: bool = False, stream=None) -> None:
    """
    Point the root logger at a single stream handler.

    Handlers installed by an earlier call are removed first, so calling
    this twice never duplicates output. ``stream`` defaults to stdout; the
    CLI passes stderr to keep stdout for its JSON results.
    """
    if json_lines:
        formatter: logging.Formatter = _JSONFormatter()
    else:
        formatter = logging.Formatter(_PLAIN_FORMAT, datefmt=_PLAIN_DATEFMT)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def _begin_request() -> None:
    g.request_id = uuid.uuid4().hex
    g.request_started = time.perf_counter()
    logging.getLogger(HTTP_LOGGER).debug("-> %s %s", request.method, request.path)


def _finish_request(response):
    started = g.get("request_started")
    elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
    logging.getLogger(HTTP_LOGGER).info(
        "<- %s %s %d (%.1f ms)",
        request.method,
        request.path,
        response.status_code,
        elapsed_ms,
    )
    if g.get("request_id"):
        response.headers[REQUEST_ID_HEADER] = g.request_id
    return response


def init_logging(app: Flask, *, level: Optional[str] = None, app_env: str = "development") -> None:
    """
    Configure logging for ``app`` and register the request hooks.

    JSON lines are used only when ``app_env`` is ``production``. Without an
    explicit ``level`` production logs at INFO and every other environment
    at DEBUG.
    """
    json_lines = app_env == "production"
    level = level or ("INFO" if json_lines else "DEBUG")
    configure_logging(level, json_lines=json_lines)

    app.before_request(_begin_request)
    app.after_request(_finish_request)

    logging.getLogger("casefile").info(
        "Logging configured for %s (level=%s, json=%s)", app_env, level, json_lines,
    )
