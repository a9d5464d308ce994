"""
Retry and Recovery.

This module wraps operations that may hit transient failures.

Key features:
- RetryPolicy: immutable backoff configuration
- retry_with_backoff(): exponential backoff for recoverable errors
- with_recovery(): classify a failure and pick a recovery strategy
  - missing file: create the parent directory, retry once
  - network / other I/O: retry with backoff
  - anything else: re-raise immediately
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from shellpack.errors import FileOperationFailed, ShellpackError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Backoff configuration.

    Attributes:
        max_attempts: Total attempts, including the first one
        initial_delay: Delay in seconds before the second attempt
        max_delay: Upper bound for any single delay
        backoff_factor: Multiplier applied to the delay after each retry
    """

    max_attempts: int = 3
    initial_delay: float = 0.1
    max_delay: float = 5.0
    backoff_factor: float = 2.0

    def delays(self) -> list[float]:
        """Return the sleep before each retry (len == max_attempts - 1)."""
        result = []
        delay = self.initial_delay
        for _ in range(max(self.max_attempts - 1, 0)):
            result.append(min(delay, self.max_delay))
            delay = min(delay * self.backoff_factor, self.max_delay)
        return result


DEFAULT_POLICY = RetryPolicy()


def is_recoverable(error: BaseException) -> bool:
    """Check whether an error may succeed if the operation is retried."""
    return isinstance(error, ShellpackError) and error.recoverable


def _backoff(
    operation: Callable[[], T],
    policy: RetryPolicy,
    sleep: Callable[[float], None],
    error: ShellpackError,
) -> T:
    # The first attempt has already failed with error.
    for delay in policy.delays():
        logger.info("%s; retrying in %.2fs", error, delay)
        sleep(delay)
        try:
            return operation()
        except ShellpackError as e:
            if not is_recoverable(e):
                raise
            error = e

    raise error


def retry_with_backoff(
    operation: Callable[[], T],
    policy: RetryPolicy = DEFAULT_POLICY,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run an operation, retrying recoverable failures with exponential backoff.

    Args:
        operation: Zero-argument callable
        policy: Retry configuration
        sleep: Sleep function (injectable for tests)

    Returns:
        The operation's result

    Raises:
        ShellpackError: A non-recoverable error immediately, or the last
            recoverable error once max_attempts is exhausted
    """
    try:
        return operation()
    except ShellpackError as e:
        if not is_recoverable(e):
            raise
        return _backoff(operation, policy, sleep, e)


def with_recovery(
    operation: Callable[[], T],
    policy: RetryPolicy = DEFAULT_POLICY,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run an operation and try to recover from a failure.

    A missing-file FileOperationFailed is healed by creating the missing
    parent directory and retrying exactly once. Other recoverable errors
    (network failures, generic I/O) go through retry_with_backoff.
    Non-recoverable errors propagate untouched.

    Args:
        operation: Zero-argument callable
        policy: Retry configuration for the backoff path
        sleep: Sleep function (injectable for tests)

    Returns:
        The operation's result
    """
    try:
        return operation()
    except FileOperationFailed as e:
        if not e.is_not_found:
            return _backoff(operation, policy, sleep, e)
        missing = e
    except ShellpackError as e:
        if not is_recoverable(e):
            raise
        return _backoff(operation, policy, sleep, e)

    parent = missing.path.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.warning("Could not create %s to recover from: %s", parent, missing)
        raise missing

    logger.info("Created missing directory %s, retrying once", parent)
    return operation()
