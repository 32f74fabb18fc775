"""
Project logger.

One named logger ("learnpath") writes to a rotating file under LOG_DIR and,
with LOG_TO_CONSOLE set, to stdout. Every record carries the id of the HTTP
request it was emitted under (or "-" outside a request); the API middleware
binds it with `request_context` and echoes it in the x-request-id header.
"""

from __future__ import annotations

import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

LOGGER_NAME = "learnpath"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s request_id=%(request_id)s %(filename)s:%(lineno)d %(message)s"
NO_REQUEST = "-"

_request_id: ContextVar[str] = ContextVar("learnpath_request_id", default=NO_REQUEST)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = _request_id.get()
        return True


def _level_from_env(default: str) -> int:
    name = os.getenv("LOG_LEVEL", default).upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_logging(*, log_dir: str | Path | None = None, log_file: str = "learnpath.log", level: str = "INFO") -> logging.Logger:
    """Idempotent: handlers are attached on the first call only."""
    logger = logging.getLogger(LOGGER_NAME)
    if getattr(logger, "_configured", False):
        return logger

    numeric_level = _level_from_env(level)
    logger.setLevel(numeric_level)
    logger.propagate = False

    handlers: list[logging.Handler] = []
    directory = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    directory.mkdir(parents=True, exist_ok=True)
    handlers.append(
        RotatingFileHandler(directory / log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
    )
    if os.getenv("LOG_TO_CONSOLE", "").strip().lower() in {"1", "true", "yes", "on"}:
        handlers.append(logging.StreamHandler(sys.stdout))

    request_filter = RequestIdFilter()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler.addFilter(request_filter)
        logger.addHandler(handler)

    logger._configured = True  # type: ignore[attr-defined]
    return logger


def current_request_id() -> str:
    return _request_id.get()


@contextmanager
def request_context(request_id: Optional[str] = None) -> Iterator[str]:
    """Bind a request id (a fresh uuid when none is given) for the duration of the block."""
    rid = (request_id or "").strip() or str(uuid.uuid4())
    token = _request_id.set(rid)
    try:
        yield rid
    finally:
        _request_id.reset(token)


class log_request:
    """
    Times a service operation:
      with log_request(logger, "course_progress course_id=..."):
          ...
    Logs "<name> ok" at INFO, or "<name> failed" at WARNING with the exception type.
    """

    def __init__(self, logger: logging.Logger, name: str):
        self.logger = logger
        self.name = name
        self.start = 0.0

    def __enter__(self) -> log_request:
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        dur_ms = int((time.perf_counter() - self.start) * 1000)
        if exc_type is None:
            self.logger.info("%s ok duration_ms=%s", self.name, dur_ms)
        else:
            self.logger.warning("%s failed duration_ms=%s error=%s", self.name, dur_ms, exc_type.__name__)
        return False
