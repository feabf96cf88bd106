"""
Custom exceptions for basescout.

This module defines the error hierarchy used by the request pipeline, the
router activity scanner and the toolkit boundary. Upstream failures are split
by how the pipeline treats them: transport and HTTP status failures are
retried, shape failures and rate-limit rejections are not.
"""

from typing import Optional, Any, Dict, List


class BasescoutError(Exception):
    """
    Base exception for all basescout errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        context: Additional context information
    """

    def __init__(self,
                 message: str,
                 error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None
        }

# Configuration Related Errors

class ConfigurationError(BasescoutError):
    """Raised when configuration values are missing or invalid."""
    pass

# Tool boundary errors

class ToolInputError(BasescoutError):
    """Raised when a tool is called with arguments that fail validation."""

    def __init__(self, tool_name: str, errors: List[str]):
        message = f"Invalid input for '{tool_name}': {'; '.join(errors)}"
        super().__init__(
            message=message,
            context={"tool_name": tool_name, "errors": errors}
        )
        self.errors = errors

# Upstream errors

class UpstreamError(BasescoutError):
    """Base class for failures talking to the explorer API."""
    pass

class TransportError(UpstreamError):
    """Raised on network-level failures (connection reset, DNS, timeouts)."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(
            message=f"Request to {url} failed: {cause}",
            context={"url": url},
            cause=cause
        )


class UpstreamHttpError(UpstreamError):
    """Raised when the explorer answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int, response_text: str):
        super().__init__(
            message=f"Blockscout request failed ({status_code}): {response_text}",
            context={"url": url, "status_code": status_code}
        )
        self.status_code = status_code
        self.response_text = response_text


class UpstreamShapeError(UpstreamError):
    """Raised when a response body does not match the expected shape."""

    def __init__(self, url: str, errors: List[str], cause: Optional[Exception] = None):
        super().__init__(
            message=f"Unexpected response shape from {url}: {'; '.join(errors)}",
            context={"url": url, "errors": errors},
            cause=cause
        )
        self.errors = errors


class RateExceeded(UpstreamError):
    """Raised when the outbound request quota for the current window is used up."""

    def __init__(self, key: str, retry_after_seconds: Optional[float] = None):
        message = "Rate limit exceeded while calling Blockscout"
        if retry_after_seconds is not None:
            message += f". Retry after {retry_after_seconds:.2f}s"

        super().__init__(
            message=message,
            context={"key": key, "retry_after_seconds": retry_after_seconds}
        )
        self.key = key
        self.retry_after_seconds = retry_after_seconds


def handle_exception(exception: Exception,
                     context: Optional[Dict[str, Any]] = None) -> BasescoutError:
    """
    Convert any exception into a BasescoutError.

    Args:
        exception: The original exception
        context: Additional context to attach

    Returns:
        Appropriate BasescoutError subclass
    """
    context = context or {}

    if isinstance(exception, BasescoutError):
        exception.context.update(context)
        return exception

    if isinstance(exception, ValueError):
        return BasescoutError(
            message=f"Validation error: {exception}",
            error_code="ValidationError",
            context=context,
            cause=exception
        )

    return BasescoutError(
        message=f"Unexpected error: {exception}",
        context=context,
        cause=exception
    )
