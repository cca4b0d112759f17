"""Bounded retry loop built on tenacity.

An operation fails by raising an ``Exception``. Every failure is retried the
same way, with no delay between attempts. A budget of ``N`` allows ``N``
reported attempts followed by one trailing attempt whose result (value or
exception) is handed back to the caller as is. The ``N + 1`` total looks like
an off-by-one but existing callers depend on it.
"""

from __future__ import annotations

import functools
import logging
import operator
from typing import Any, Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_none,
)

from resilience.domain.models.outcome import RetryOutcome

logger = logging.getLogger(__name__)

T = TypeVar("T")

Reporter = Callable[[int, BaseException], None]


def log_failure(attempt_number: int, error: BaseException) -> None:
    """Default reporter: one WARNING line per retried failure."""
    logger.warning(f"Tried {attempt_number} times, got error: {error!r}")


def discard_failure(attempt_number: int, error: BaseException) -> None:
    """Reporter that drops every report."""


def _validate_budget(attempt_budget: int) -> int:
    """Return the budget as a plain int, rejecting non-integers and negatives."""
    # bool is an int subclass, reject it explicitly
    if isinstance(attempt_budget, bool):
        raise TypeError("attempt_budget must be an int, got bool")
    try:
        budget = operator.index(attempt_budget)
    except TypeError:
        raise TypeError(
            f"attempt_budget must be an int, got {type(attempt_budget).__name__}"
        ) from None
    if budget < 0:
        raise ValueError(f"attempt_budget must be non-negative, got {budget}")
    return budget


def _create_retrying(attempt_budget: int, reporter: Optional[Reporter]) -> Retrying:
    """Create the tenacity controller for a budget.

    ``before_sleep`` only runs for attempts that are going to be retried, so
    the trailing attempt is never reported.
    """
    if reporter is None:
        reporter = log_failure

    def _before_sleep(retry_state: RetryCallState) -> None:
        if retry_state.outcome is None:
            return
        reporter(retry_state.attempt_number, retry_state.outcome.exception())

    return Retrying(
        stop=stop_after_attempt(attempt_budget + 1),
        wait=wait_none(),
        retry=retry_if_exception_type(Exception),
        reraise=True,
        before_sleep=_before_sleep,
    )


def retry(
    attempt_budget: int,
    operation: Callable[[], T],
    reporter: Optional[Reporter] = None,
) -> T:
    """Invoke ``operation`` until it returns or the budget runs out.

    Args:
        attempt_budget: Number of reported attempts (>= 0). One extra
            unreported attempt follows when all of them fail.
        operation: Zero-argument callable; raising an ``Exception`` means failure
        reporter: Called as ``reporter(attempt_number, error)`` for each failed
            attempt except the last one (defaults to ``log_failure``)

    Returns:
        The value of the first successful invocation

    Raises:
        TypeError: If attempt_budget is not an int
        ValueError: If attempt_budget is negative
        Exception: The exception raised by the last invocation, unchanged
    """
    attempt_budget = _validate_budget(attempt_budget)
    controller = _create_retrying(attempt_budget, reporter)
    return controller(operation)


def retrying(
    attempt_budget: int,
    reporter: Optional[Reporter] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of ``retry``.

    The arguments of each call are reused for every attempt of that call.
    """
    attempt_budget = _validate_budget(attempt_budget)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapped(*args: Any, **kwargs: Any) -> T:
            return retry(attempt_budget, functools.partial(func, *args, **kwargs), reporter)

        return wrapped

    return decorator


def run_with_outcome(
    attempt_budget: int,
    operation: Callable[[], T],
    reporter: Optional[Reporter] = None,
) -> RetryOutcome:
    """Run ``retry`` and capture the result instead of raising.

    Budget validation errors are still raised.
    """
    attempt_budget = _validate_budget(attempt_budget)
    attempts = 0

    def _counted() -> T:
        nonlocal attempts
        attempts += 1
        return operation()

    try:
        value = retry(attempt_budget, _counted, reporter)
    except Exception as e:
        logger.debug(f"Operation failed after {attempts} attempts: {e!r}")
        return RetryOutcome(error=e, attempts=attempts)
    return RetryOutcome(value=value, attempts=attempts)
