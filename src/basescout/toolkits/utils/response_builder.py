"""Response Builder Utilities
===========================

Standardized response construction so that every tool reports success or
failure the same way.
"""

import time
from typing import Any, Dict, Optional

__all__ = ["ResponseBuilder"]

_RESERVED_FIELDS = ("message", "error_type", "details", "success", "timestamp")


class ResponseBuilder:
    """Builds tool responses and injects toolkit identification into each one."""

    def __init__(self, toolkit_info: Optional[Dict[str, Any]] = None):
        self.toolkit_info = toolkit_info or {}

    def success_response(
        self,
        data: Any = None,
        message: str = "Operation completed successfully",
        **additional_fields
    ) -> Dict[str, Any]:
        """Create a success response.

        Args:
            data: Response data payload
            message: Success message
            **additional_fields: Extra top-level fields

        Returns:
            dict: ``{"success": True, "message": ..., "fetched_at": ..., "data": ...}``
        """
        response = {
            "success": True,
            "message": message,
            "fetched_at": int(time.time())
        }

        if data is not None:
            response["data"] = data

        response.update(self.toolkit_info)
        response.update(additional_fields)
        return response

    def error_response(
        self,
        message: str,
        error_type: str = "unknown_error",
        details: Optional[Dict[str, Any]] = None,
        **additional_fields
    ) -> Dict[str, Any]:
        """Create an error response.

        Example:
            >>> builder.error_response(
            ...     message="Rate limit exceeded while calling Blockscout",
            ...     error_type="rate_limited",
            ... )
            {
                "success": False,
                "message": "Rate limit exceeded while calling Blockscout",
                "error_type": "rate_limited",
                "timestamp": 1700000000,
                ...
            }
        """
        response = {
            "success": False,
            "message": message,
            "error_type": error_type,
            "timestamp": int(time.time())
        }

        if details:
            response["details"] = details

        response.update(self.toolkit_info)

        # Drop keys that would clobber the standard fields
        safe_additional_fields = {
            k: v for k, v in additional_fields.items()
            if k not in list(_RESERVED_FIELDS) + list(self.toolkit_info.keys())
        }
        response.update(safe_additional_fields)
        return response

    def api_error_response(
        self,
        api_endpoint: str,
        http_status: Optional[int] = None,
        api_message: Optional[str] = None,
        error_type: str = "api_error",
        **additional_fields
    ) -> Dict[str, Any]:
        """Create an upstream API error response.

        Args:
            api_endpoint: Explorer endpoint that failed
            http_status: HTTP status code received, if any
            api_message: Original error message
            error_type: Error classification
            **additional_fields: Extra top-level fields
        """
        message = f"API request failed for {api_endpoint}"
        if http_status:
            message += f" (HTTP {http_status})"
        if api_message:
            message += f": {api_message}"

        details: Dict[str, Any] = {"endpoint": api_endpoint}
        if http_status:
            details["http_status"] = http_status
        if api_message:
            details["api_message"] = api_message

        return self.error_response(
            message=message,
            error_type=error_type,
            details=details,
            **additional_fields
        )
