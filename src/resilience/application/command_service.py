"""Command retry service - retries an external command under a retry budget"""

import logging
from typing import Optional, Sequence

from resilience.domain.config.retry import RetryConfig
from resilience.domain.models.outcome import RetryOutcome
from resilience.infrastructure.command import run_command
from resilience.infrastructure.retry import discard_failure, log_failure, run_with_outcome

logger = logging.getLogger(__name__)


class CommandRetryService:
    """Service for running external commands until they succeed"""

    def __init__(self, retry_config: Optional[RetryConfig] = None, timeout: Optional[float] = None):
        """Initialize command retry service

        Args:
            retry_config: Retry configuration (defaults to RetryConfig())
            timeout: Optional per-attempt timeout in seconds
        """
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> RetryOutcome:
        """Run a command, retrying every failure

        Args:
            args: Command and its arguments

        Returns:
            RetryOutcome with the CommandResult or the last error
        """
        if not args:
            raise ValueError("No command given")

        reporter = log_failure if self.retry_config.report_failures else discard_failure
        logger.info(
            f"Running {args[0]!r} with an attempt budget of {self.retry_config.attempts}"
        )

        outcome = run_with_outcome(
            self.retry_config.attempts,
            lambda: run_command(args, timeout=self.timeout),
            reporter,
        )

        if outcome.succeeded:
            logger.info(f"Command succeeded after {outcome.attempts} attempt(s)")
        else:
            logger.error(f"Command failed after {outcome.attempts} attempt(s): {outcome.error}")
        return outcome
