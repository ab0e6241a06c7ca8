"""
Logging setup shared by the API process and scripts.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send application logs to stdout at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # SQL echo is controlled separately; keep the engine quiet by default
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
