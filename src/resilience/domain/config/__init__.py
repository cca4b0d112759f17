"""Configuration models with Pydantic validation."""

from resilience.domain.config.app import AppConfig
from resilience.domain.config.log import LoggingConfig
from resilience.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "RetryConfig",
]
