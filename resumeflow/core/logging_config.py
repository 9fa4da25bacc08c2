"""
Logging setup - one stream handler for the whole service.

Every module logs through `logging.getLogger(__name__)`; this only decides
where the records go and how they look.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the service handler on the root logger (idempotent)."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in root.handlers:
        if getattr(handler, "_resumeflow", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._resumeflow = True
    root.addHandler(handler)

    # pymongo and httpx are chatty at INFO
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
