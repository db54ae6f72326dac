"""Logging configuration.

All log output goes to stderr; stdout belongs to the stdio MCP protocol.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "info", verbose: bool = False) -> None:
    """Configure root logging for the process.

    Handlers are only installed once; later calls just adjust the level.

    Args:
        level: Level name (debug, info, warning, error).
        verbose: Force debug level regardless of ``level``.
    """
    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(resolved)
    # aiohttp's access log is noisy at debug level
    logging.getLogger("aiohttp.access").setLevel(max(resolved, logging.INFO))
