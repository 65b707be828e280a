from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Optional

# Per-request values injected into every log record
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | user=%(user_id)s | %(message)s"

# Third-party loggers that are noisy at INFO.
_QUIET_LOGGERS = ("passlib", "aiosqlite", "asyncio")


class RequestContextFilter(logging.Filter):
    """
    Stamp each record with the request's correlation id and authenticated user.

    Records emitted outside a request (startup, migrations) get "-".
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.correlation_id = correlation_id_var.get() or "-"
        record.user_id = user_id_var.get() or "-"
        return True


# PUBLIC_INTERFACE
def configure_logging(level: int | str = logging.INFO) -> None:
    """Route all logging to stdout in the pipe-separated request-aware format."""
    if isinstance(level, str):
        level = level.upper()

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    # Remove pre-existing default handlers configured elsewhere (e.g., basicConfig)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
