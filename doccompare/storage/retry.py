import time
from collections.abc import Callable
from typing import TypeVar

from doccompare.logging.logger import Log
from doccompare.storage.exceptions import StorageError, StorageUnavailableError

T = TypeVar("T")


class RetryPolicy:
    """Exponential backoff around one storage operation.

    Only ``StorageUnavailableError`` is retried. Any other ``StorageError``
    surfaces on the first attempt. When attempts or the timeout
    ceiling run out, the last error is re-raised with ``attempts`` and
    ``duration_seconds`` set on it.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_seconds: float = 0.5,
        max_delay_seconds: float = 5.0,
        multiplier: float = 2.0,
        timeout_seconds: float | None = 60.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self.max_delay_seconds = max_delay_seconds
        self.multiplier = multiplier
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._clock = clock

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (1-based)."""
        delay = self.base_delay_seconds * (self.multiplier ** (attempt - 1))
        return min(delay, self.max_delay_seconds)

    def run(self, operation: Callable[[], T], description: str = "storage operation") -> T:
        started = self._clock()
        attempt = 0
        while True:
            attempt += 1
            try:
                return operation()
            except StorageUnavailableError as exc:
                elapsed = self._clock() - started
                delay = self.delay_for(attempt)
                out_of_time = (
                    self.timeout_seconds is not None
                    and elapsed + delay > self.timeout_seconds
                )
                if attempt >= self.max_attempts or out_of_time:
                    self._annotate(exc, attempt, elapsed)
                    Log.error(
                        f"{description} failed after {attempt} attempts "
                        f"in {elapsed:.2f}s: {exc}"
                    )
                    raise
                Log.warning(
                    f"{description} failed (attempt {attempt}/{self.max_attempts}), "
                    f"retrying in {delay:.2f}s: {exc}"
                )
                self._sleep(delay)
            except StorageError as exc:
                self._annotate(exc, attempt, self._clock() - started)
                raise

    @staticmethod
    def _annotate(exc: StorageError, attempts: int, elapsed: float) -> None:
        exc.attempts = attempts
        exc.duration_seconds = round(elapsed, 3)
