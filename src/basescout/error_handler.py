"""
Error handling utilities for basescout.

This module provides consistent error logging and statistics for the tool
boundary, where every propagated error is turned into a failure response
instead of escaping to the caller.
"""

import traceback
from typing import Optional, Dict, Any
from loguru import logger

from basescout.exceptions import BasescoutError, handle_exception


class ErrorHandler:
    """Central error handler for tool invocations."""

    def __init__(self, enable_detailed_logging: bool = True):
        self.enable_detailed_logging = enable_detailed_logging
        self.error_stats = {
            "total_errors": 0,
            "errors_by_type": {},
            "errors_by_component": {}
        }

    def handle_error(self,
                     error: Exception,
                     component: str = "unknown",
                     context: Optional[Dict[str, Any]] = None,
                     reraise: bool = True) -> Optional[BasescoutError]:
        """
        Handle an error with consistent logging and statistics tracking.

        Args:
            error: The exception that occurred
            component: Component (usually the tool name) where the error occurred
            context: Additional context
            reraise: Whether to re-raise the error after handling

        Returns:
            BasescoutError if not re-raising, None if re-raising

        Raises:
            BasescoutError: If reraise=True
        """
        basescout_error = handle_exception(error, context=context or {})

        self.error_stats["total_errors"] += 1
        error_type = type(basescout_error).__name__
        self.error_stats["errors_by_type"][error_type] = \
            self.error_stats["errors_by_type"].get(error_type, 0) + 1
        self.error_stats["errors_by_component"][component] = \
            self.error_stats["errors_by_component"].get(component, 0) + 1

        self._log_error(basescout_error, component)

        if reraise:
            raise basescout_error
        return basescout_error

    def _log_error(self, error: BasescoutError, component: str):
        """Log an error with appropriate detail level."""
        logger.error(f"[{component}] {error.message}")

        if self.enable_detailed_logging:
            if error.context:
                logger.debug(f"Error context: {error.context}")

            if error.cause:
                logger.debug(f"Original exception: {error.cause}")
                for line in traceback.format_exception(
                    type(error.cause), error.cause, error.cause.__traceback__
                ):
                    logger.debug(line.strip())

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        return {
            "total_errors": self.error_stats["total_errors"],
            "errors_by_type": dict(self.error_stats["errors_by_type"]),
            "errors_by_component": dict(self.error_stats["errors_by_component"]),
        }

# Global error handler instance
_global_error_handler = ErrorHandler()

def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    return _global_error_handler
