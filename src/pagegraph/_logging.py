"""Logging configuration for pagegraph.

Modules log through ``logging.getLogger(__name__)``. Output goes to stderr
because stdout carries the MCP stdio stream.
"""

import logging
import sys


def configure_logging(level_name: str = "INFO") -> None:
    """Install a stderr handler on the package logger.

    Subsequent calls only adjust the level.
    """
    package_logger = logging.getLogger("pagegraph")
    level = getattr(logging, level_name.upper(), logging.INFO)
    package_logger.setLevel(level)

    if package_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.propagate = False
