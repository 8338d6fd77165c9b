"""
Logging setup for the studio console.

All modules log through named children of the "studio" logger, e.g.
logging.getLogger("studio.environments.google.sheets"). This module
attaches a single console handler to the parent logger.
"""

import logging
import sys


logger = logging.getLogger("studio")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the "studio" logger hierarchy.

    Safe to call more than once; the handler is only added the first time.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def mask_secret(value: str, visible: int = 8) -> str:
    """Show only the first characters of a key for log output."""
    if not value:
        return ""
    return value[:visible] + "...(hidden)"
