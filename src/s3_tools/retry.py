"""Retry with exponential backoff for fallible remote calls."""

import time
from typing import Callable, Optional, TypeVar

from s3_tools.core import get_logger
from s3_tools.core.exceptions import ValidationError

logger = get_logger(__name__)

T = TypeVar("T")


def backoff_delay(
    attempt: int, base_delay: float, max_delay: Optional[float] = None
) -> float:
    """Delay to wait after ``attempt`` fails, before the next one.

    Doubles per attempt: base_delay, 2 * base_delay, 4 * base_delay, ...
    """
    delay = base_delay * 2 ** (attempt - 1)
    if max_delay is not None:
        delay = min(delay, max_delay)
    return delay


def execute(
    operation: Callable[[], T],
    is_retryable: Callable[[BaseException], bool],
    max_attempts: int,
    base_delay: float = 0.5,
    max_delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``operation`` until it succeeds or attempts run out.

    Args:
        operation: Zero-argument callable performing the remote call
        is_retryable: Decides whether a raised error is worth another attempt
        max_attempts: Total number of attempts, including the first
        base_delay: Seconds to wait after the first failed attempt
        max_delay: Optional cap on any single delay
        sleep: Function used to wait between attempts

    Returns:
        Whatever ``operation`` returns on its first successful attempt

    Raises:
        ValidationError: If max_attempts is less than 1
        Exception: The error of a non-retryable failure, or of the final
            attempt once attempts are exhausted
    """
    if max_attempts < 1:
        raise ValidationError(f"max_attempts must be at least 1, got: {max_attempts}")

    attempt = 1
    while True:
        try:
            return operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            if attempt >= max_attempts:
                logger.error(
                    "Retry attempts exhausted",
                    attempts=attempt,
                    error=str(e),
                )
                raise

            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                "Retrying after retryable error",
                attempt=attempt,
                max_attempts=max_attempts,
                delay=delay,
                error=str(e),
            )
            sleep(delay)
            attempt += 1
