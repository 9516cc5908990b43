"""
Process-wide logging setup.

Every record carries the request's correlation id and a short prefix of its
session id (the full id is a bearer secret and never reaches the logs). The
HTTP middleware in src.api.main fills both context variables per request.
"""
from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import IO, Optional, Union

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | sid=%(session_id)s | %(message)s"
SESSION_ID_PREFIX = 8

# third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("passlib",)


def _session_tag(session_id: Optional[str]) -> str:
    if not session_id:
        return "-"
    return session_id[:SESSION_ID_PREFIX]


class RequestContextLogFilter(logging.Filter):
    """Stamp correlation_id and session_id attributes onto each record ("-" when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "-"
        record.session_id = _session_tag(session_id_var.get())
        return True


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str] = logging.INFO, stream: Optional[IO[str]] = None) -> None:
    """
    Replace the root handlers with a single stream handler (stdout by default)
    using LOG_FORMAT and the request-context filter.
    """
    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.addFilter(RequestContextLogFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
