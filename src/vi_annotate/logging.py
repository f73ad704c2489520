import logging
import os
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# gapic/grpc chatter drowns out poll progress at DEBUG
CLIENT_LIBRARY_LOGGERS = ("google", "grpc", "urllib3")


def resolve_level(name: Optional[str] = None) -> int:
    """Level from ``name``, else LOG_LEVEL, else INFO. Unknown names fall back to INFO."""
    value = getattr(logging, (name or os.environ.get("LOG_LEVEL") or "INFO").upper(), None)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: Optional[str] = None) -> int:
    resolved = resolve_level(level)
    logging.basicConfig(
        level=resolved,
        format=os.environ.get("LOG_FORMAT", DEFAULT_FORMAT),
        datefmt=os.environ.get("LOG_DATEFMT", DEFAULT_DATEFMT),
    )
    for name in CLIENT_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.INFO))
    return resolved
