"""
Configuration system for basescout.

This module provides the configuration models consumed by the request
pipeline and the toolkit. Settings can be loaded from:
- Environment variables (a local .env file is honoured)
- YAML files
- Python dictionaries
"""

import os
from pathlib import Path
from typing import Optional, Dict, Any, Union

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from basescout.exceptions import ConfigurationError

SUPPORTED_NETWORKS = ("base-mainnet", "base-sepolia")

DEFAULT_MAINNET_URL = "https://base.blockscout.com/api"
DEFAULT_SEPOLIA_URL = "https://base-sepolia.blockscout.com/api"


class ExplorerConfig(BaseModel):
    """Upstream explorer endpoints and credentials."""
    network: str = "base-mainnet"
    mainnet_url: str = DEFAULT_MAINNET_URL
    sepolia_url: str = DEFAULT_SEPOLIA_URL
    api_key: Optional[str] = None
    http_timeout: Optional[float] = None  # None keeps the httpx default

    @field_validator('network')
    @classmethod
    def validate_network(cls, v):
        if v not in SUPPORTED_NETWORKS:
            raise ValueError(f'network must be one of: {list(SUPPORTED_NETWORKS)}')
        return v

    @field_validator('mainnet_url', 'sepolia_url')
    @classmethod
    def validate_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Explorer URL must be absolute http(s): {v}")
        return v

    @property
    def base_url(self) -> str:
        """Base URL of the explorer API for the selected network."""
        return self.sepolia_url if self.network == "base-sepolia" else self.mainnet_url


class CacheConfig(BaseModel):
    """Configuration for the response cache."""
    enabled: bool = True
    ttl_seconds: float = 15.0  # 0 disables expiry
    max_size: int = 500

    @field_validator('ttl_seconds')
    @classmethod
    def validate_ttl(cls, v):
        if v < 0:
            raise ValueError('ttl_seconds must be non-negative')
        return v

    @field_validator('max_size')
    @classmethod
    def validate_max_size(cls, v):
        if v < 1:
            raise ValueError('max_size must be at least 1')
        return v


class RateLimitConfig(BaseModel):
    """Outbound request quota shared by every tool."""
    points: int = 10
    duration_seconds: float = 1.0

    @field_validator('points')
    @classmethod
    def validate_points(cls, v):
        if v < 1:
            raise ValueError('points must be at least 1')
        return v

    @field_validator('duration_seconds')
    @classmethod
    def validate_duration(cls, v):
        if v <= 0:
            raise ValueError('duration_seconds must be positive')
        return v


class RetryConfig(BaseModel):
    """Retry policy for transport and HTTP status failures."""
    attempts: int = 3
    min_delay_seconds: float = 0.25
    max_delay_seconds: float = 1.5

    @field_validator('attempts')
    @classmethod
    def validate_attempts(cls, v):
        if v < 1:
            raise ValueError('attempts must be at least 1')
        return v

    @model_validator(mode='after')
    def check_delays(self):
        if self.min_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError('retry delays must be non-negative')
        if self.max_delay_seconds < self.min_delay_seconds:
            raise ValueError('max_delay_seconds must be >= min_delay_seconds')
        return self


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = "INFO"
    file_path: Optional[str] = None
    file_rotation: str = "10 MB"
    file_retention: int = 3
    enable_console: bool = True
    enable_file: bool = False
    console_style: str = "clean"  # "clean", "timestamp", or "detailed"
    module_levels: Optional[Dict[str, str]] = None  # e.g. {"basescout.cache": "WARNING"}

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('console_style')
    @classmethod
    def validate_console_style(cls, v):
        valid_styles = ['clean', 'timestamp', 'detailed']
        if v not in valid_styles:
            raise ValueError(f'console_style must be one of: {valid_styles}')
        return v

    def get_log_file_path(self) -> Optional[Path]:
        """Get the log file path."""
        if self.file_path:
            return Path(self.file_path)
        return Path("logs") / "basescout.log"


class BasescoutConfig(BaseModel):
    """Main configuration for basescout."""

    explorer: ExplorerConfig = Field(default_factory=ExplorerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    routers_config_path: Optional[str] = None

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "BasescoutConfig":
        """
        Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ConfigurationError: If the YAML is invalid or fails validation
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in configuration file {path}: {e}")
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", cause=e)

        logger.info(f"Loaded configuration from {path}")
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BasescoutConfig":
        """Create configuration from a dictionary."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", cause=e)

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> "BasescoutConfig":
        """
        Return a copy of this configuration with environment overrides applied.

        Millisecond variables (CACHE_TTL_MS, RETRY_MIN_MS, RETRY_MAX_MS) are
        converted to seconds.
        """
        environ = os.environ if environ is None else environ
        data = self.model_dump()

        env_mappings = {
            "BASE_NETWORK": (("explorer", "network"), str),
            "BLOCKSCOUT_MAINNET": (("explorer", "mainnet_url"), str),
            "BLOCKSCOUT_SEPOLIA": (("explorer", "sepolia_url"), str),
            "BLOCKSCOUT_API_KEY": (("explorer", "api_key"), str),
            "CACHE_TTL_MS": (("cache", "ttl_seconds"), _millis_to_seconds),
            "CACHE_MAX": (("cache", "max_size"), int),
            "RATE_POINTS": (("rate_limit", "points"), int),
            "RATE_DURATION_S": (("rate_limit", "duration_seconds"), float),
            "RETRY_ATTEMPTS": (("retry", "attempts"), int),
            "RETRY_MIN_MS": (("retry", "min_delay_seconds"), _millis_to_seconds),
            "RETRY_MAX_MS": (("retry", "max_delay_seconds"), _millis_to_seconds),
            "LOG_LEVEL": (("logging", "level"), str),
            "ROUTERS_CONFIG_PATH": (("routers_config_path",), str),
        }

        for env_var, (config_path, convert) in env_mappings.items():
            raw = environ.get(env_var)
            if raw is None or raw == "":
                continue
            try:
                value = convert(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_var}: {raw!r}",
                    context={"env_var": env_var},
                    cause=e,
                )

            if len(config_path) == 1:
                data[config_path[0]] = value
            else:
                data[config_path[0]][config_path[1]] = value
            logger.debug(f"Set config from {env_var}: {'.'.join(config_path)}")

        return self.from_dict(data)


def _millis_to_seconds(raw: str) -> float:
    return int(raw) / 1000.0


def load_config(config_path: Optional[Union[str, Path]] = None,
                environ: Optional[Dict[str, str]] = None,
                load_dotenv_file: bool = True) -> BasescoutConfig:
    """
    Load configuration from an optional YAML file plus environment overrides.

    Args:
        config_path: Optional YAML file with a BasescoutConfig structure
        environ: Environment mapping to read (defaults to os.environ)
        load_dotenv_file: Whether to load a local .env file first

    Returns:
        Validated BasescoutConfig
    """
    if load_dotenv_file and environ is None:
        load_dotenv()

    if config_path:
        config = BasescoutConfig.from_yaml(config_path)
    else:
        config = BasescoutConfig()

    return config.apply_env(environ)
