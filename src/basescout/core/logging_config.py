"""
Logging configuration for basescout.

Console output goes to stderr so that stdout stays clean for tool results.
"""

import os
import re
import sys
from typing import Callable, Dict, Optional

from loguru import logger


def format_record(record: Dict) -> str:
    """
    Clean format: just the message, coloured by level.
    """
    message = record["message"]

    # Escape curly braces to prevent format string errors
    message = message.replace("{", "{{").replace("}", "}}")
    message = message.replace("<", r"\<")

    level = record["level"].name
    if level == "DEBUG":
        return f"<dim>{message}</dim>\n"

    # Remove module paths like "basescout.toolkits.utils.http_client:42 - "
    message = re.sub(r'^[\w\.]+:\d+ - ', '', message)

    if level in ["ERROR", "CRITICAL"]:
        return f"<red>{message}</red>\n"
    elif level == "WARNING":
        return f"<yellow>{message}</yellow>\n"
    elif level == "SUCCESS":
        return f"<green><bold>{message}</bold></green>\n"
    return f"{message}\n"


def get_console_format(style: str = "clean"):
    """Get console format based on style preference."""
    if style == "timestamp":
        return "<dim>{time:HH:mm:ss}</dim> | <level>{message}</level>"
    elif style == "detailed":
        return "<green>{time:HH:mm:ss}</green> | <level>{level: <5}</level> | <dim>{name}</dim> | <level>{message}</level>"
    return format_record


def setup_logging(config: 'LoggingConfig', console_filter: Optional[Callable] = None):
    """
    Set up logging sinks.

    Args:
        config: LoggingConfig instance
        console_filter: Optional filter function for console output
    """
    logger.remove()

    if console_filter is None and config.module_levels:
        console_filter = create_module_filter(config.module_levels)

    if config.enable_console:
        logger.add(
            sys.stderr,
            format=get_console_format(config.console_style),
            level=config.level,
            colorize=True,
            filter=console_filter,
            backtrace=True,
            diagnose=False,
        )

    if config.enable_file:
        log_path = config.get_log_file_path()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_format = (
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{name: <40} | "
            "{function: <20} | "
            "{message}"
        )

        # "w" truncates, anything else appends
        log_mode = os.getenv('LOG_FILE_MODE', 'a').lower()
        if log_mode not in ['w', 'a']:
            log_mode = 'a'

        logger.add(
            str(log_path),
            format=file_format,
            level=config.level,
            rotation=config.file_rotation,
            retention=config.file_retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
            mode=log_mode,
        )

    logger.debug(f"Logging configured: level={config.level}")


def create_module_filter(module_levels: Dict[str, str]):
    """
    Create a filter function based on module-specific log levels.

    Args:
        module_levels: Dict mapping module name prefixes to log levels

    Returns:
        Filter function for loguru
    """
    def filter_func(record):
        module = record["name"]

        for pattern, level in module_levels.items():
            if module.startswith(pattern):
                level_no = logger.level(level).no
                return record["level"].no >= level_no

        return True

    return filter_func
