"""
Configuration module for basescout.

Exports:
    - BasescoutConfig: The main Pydantic model for all configuration settings.
    - ExplorerConfig, CacheConfig, RateLimitConfig, RetryConfig, LoggingConfig:
      Sub-models for specific configuration sections.
    - load_config: Load configuration from a YAML file and environment variables.
"""
from .config import (
    BasescoutConfig,
    ExplorerConfig,
    CacheConfig,
    RateLimitConfig,
    RetryConfig,
    LoggingConfig,
    SUPPORTED_NETWORKS,
    load_config,
)

__all__ = [
    "BasescoutConfig",
    "ExplorerConfig",
    "CacheConfig",
    "RateLimitConfig",
    "RetryConfig",
    "LoggingConfig",
    "SUPPORTED_NETWORKS",
    "load_config",
]
