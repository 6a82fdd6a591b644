"""
Engine logging using Loguru.

The engine only emits DEBUG traces (token counts, declarations, block
factors). The `akin` namespace is disabled on import so that embedding the
engine as a library stays silent; the CLI turns it on with `--verbose`.

Example:
    from akin.core.log import logger
    logger.debug("declared {}: {} values", name, count)
"""

from __future__ import annotations

import sys

from loguru import logger

logger_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<yellow>{name: >28}</yellow>::"
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.disable("akin")


def configure_logging(verbose: bool) -> None:
    """Route `akin` logs to stderr; DEBUG when verbose, otherwise off."""
    logger.remove()
    if not verbose:
        logger.disable("akin")
        return
    logger.add(sys.stderr, format=logger_format, level="DEBUG")
    logger.enable("akin")
