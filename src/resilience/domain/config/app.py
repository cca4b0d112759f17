"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from resilience.domain.config.log import LoggingConfig
from resilience.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model aggregating all configuration sections. Validation is performed
    at load time to fail fast on configuration errors.

    Attributes:
        retry: Retry logic configuration
        logging: Log output configuration
    """

    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "retry": {
                    "attempts": 5,
                    "report_failures": True,
                },
                "logging": {
                    "level": "INFO",
                },
            }
        },
    )
