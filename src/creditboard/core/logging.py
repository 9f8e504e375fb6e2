"""Logging setup shared by the API process and background jobs."""

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger."""

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)
    else:
        root.setLevel(level.upper())
