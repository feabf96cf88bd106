from .base_api import BaseAPIToolkit

__all__ = [
    "BaseAPIToolkit",
]
