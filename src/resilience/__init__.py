"""Bounded retry of fallible operations."""

from resilience.domain.models.outcome import RetryOutcome
from resilience.infrastructure.retry import retry, retrying, run_with_outcome

__all__ = [
    "RetryOutcome",
    "retry",
    "retrying",
    "run_with_outcome",
]
