"""Logging setup shared by the API server and the CLI.

Messages carry a bracketed tag (``[fetch] ...``) naming the pipeline stage;
the formatter keeps uvicorn and httpx output in the same shape.
"""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)-7s %(message)s"
_QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "httpx")


def setup_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root and server loggers."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in _QUIET_LOGGERS:
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False
    # httpx logs every request at INFO; the fetcher already does that.
    logging.getLogger("httpx").setLevel(logging.WARNING)
