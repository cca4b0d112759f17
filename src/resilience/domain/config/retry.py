"""Retry configuration model."""

from pydantic import BaseModel, Field


class RetryConfig(BaseModel):
    """Configuration for retry logic.
    
    Attributes:
        attempts: Attempt budget; one extra trailing attempt follows when all fail
        report_failures: Log a diagnostic line for each retried failure
    """

    attempts: int = Field(3, ge=0, le=100)
    report_failures: bool = True
