"""Retry policies for the resilient channel."""
from dataclasses import dataclass
from typing import Callable

from flightmeals.core.config import Settings
from flightmeals.core.errors import ChannelError


Backoff = Callable[[int], float]


def no_backoff(retry_number: int) -> float:
    """Retry immediately."""
    return 0.0


def exponential_backoff(base: float = 0.5, factor: float = 2.0, maximum: float = 8.0) -> Backoff:
    """
    Build a backoff function: base, base*factor, base*factor^2, ... capped at maximum.

    ``retry_number`` starts at 1 for the first retry.
    """

    def _delay(retry_number: int) -> float:
        return min(maximum, base * factor ** (retry_number - 1))

    return _delay


def retry_when_retryable(error: ChannelError) -> bool:
    """Default predicate: trust the classification table."""
    return error.retryable


@dataclass(frozen=True)
class RetryPolicy:
    """
    How often and how eagerly a failed request is re-sent.

    The policy holds no counters. The channel passes the number of attempts
    made so far, so one policy can be shared by any number of concurrent calls.
    """

    max_attempts: int = 3
    backoff: Backoff = no_backoff
    should_retry: Callable[[ChannelError], bool] = retry_when_retryable

    def allows_retry(self, error: ChannelError, attempts_so_far: int) -> bool:
        """Whether another attempt may follow ``attempts_so_far`` failed ones."""
        return attempts_so_far < self.max_attempts and self.should_retry(error)

    def delay_before(self, retry_number: int) -> float:
        """Seconds to wait before retry number ``retry_number`` (1-based)."""
        return max(0.0, self.backoff(retry_number))

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        """Build the policy described by configuration."""
        if settings.backoff == "exponential":
            backoff = exponential_backoff(base=settings.backoff_base, maximum=settings.backoff_max)
        elif settings.backoff == "none":
            backoff = no_backoff
        else:
            raise ValueError(f"Unknown backoff strategy: {settings.backoff}")
        return cls(max_attempts=max(1, settings.max_attempts), backoff=backoff)
