"""
Main entry point for the basescout package.

Usage:
    python -m basescout routers
    python -m basescout call <tool> --args '<json>'
"""

import sys

from loguru import logger

from .core.logging_config import format_record

# Quiet stderr logging until the configuration is loaded
logger.remove()
logger.add(
    sys.stderr,
    format=format_record,
    colorize=True,
    level="WARNING"
)

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
