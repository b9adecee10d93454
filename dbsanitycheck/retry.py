from collections.abc import Callable
import logging
import time
from typing import TypeVar


logger = logging.getLogger(__name__)
T = TypeVar("T")


class RetryExhaustedError(RuntimeError):
    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(f"gave up after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def run_with_retries(
    fn: Callable[[], T],
    *,
    max_retries: int,
    backoff_seconds: float,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    label: str = "operation",
) -> T:
    """Call ``fn`` until it succeeds, at most ``max_retries + 1`` times, with linear backoff.

    Exceptions outside ``retry_on`` propagate immediately.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return fn()
        except retry_on as exc:
            logger.warning("%s failed", label, extra={"attempt": attempt, "error": str(exc)})
            if attempt > max_retries:
                raise RetryExhaustedError(attempt, exc) from exc
            time.sleep(backoff_seconds * attempt)
