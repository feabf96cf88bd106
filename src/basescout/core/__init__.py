"""
Core components of basescout.
"""
from .logging_config import setup_logging, format_record, get_console_format, create_module_filter

__all__ = [
    "setup_logging",
    "format_record",
    "get_console_format",
    "create_module_filter",
]
