"""
Bounded retry with exponential backoff, and per-request deadlines.

The retry helper is generic: it repeatedly hands the still-pending work back to
an attempt function until nothing is pending or the policy runs out of
retries. The delay before retry n is base_delay_ms * multiplier ** (n - 1),
with no jitter.
"""

import time
from typing import Any, Callable, List, NamedTuple, Optional, TypeVar

from catalog_shared.errors import RequestTimeoutError


T = TypeVar('T')

# Headroom kept free at the end of a Lambda invocation for building the response
DEFAULT_SAFETY_MARGIN_MS = 500


class BackoffPolicy:
    """
    Retry policy: how many extra attempts and how long to wait before each.

    The default (3 retries, 100ms base, x2) yields delays of 100, 200 and 400 ms.
    """

    def __init__(self, max_retries: int = 3, base_delay_ms: int = 100, multiplier: float = 2.0):
        if max_retries < 0:
            raise ValueError('max_retries must be non-negative')
        if base_delay_ms < 0:
            raise ValueError('base_delay_ms must be non-negative')
        if multiplier < 1:
            raise ValueError('multiplier must be at least 1')

        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.multiplier = multiplier

    def delay_ms(self, retry_number: int) -> float:
        """Delay before the given retry (1-based)."""
        if retry_number < 1:
            raise ValueError('retry_number is 1-based')
        return self.base_delay_ms * self.multiplier ** (retry_number - 1)

    def delays_ms(self) -> List[float]:
        """All delays, in order, for a run that uses every retry."""
        return [self.delay_ms(n) for n in range(1, self.max_retries + 1)]

    def __repr__(self) -> str:
        return (
            f'BackoffPolicy(max_retries={self.max_retries}, '
            f'base_delay_ms={self.base_delay_ms}, multiplier={self.multiplier})'
        )


class Deadline:
    """
    Time budget for a single request.

    Usage:
        deadline = Deadline.from_context(context, cap_ms=10000)
        deadline.check('scan')                 # raises RequestTimeoutError when expired
        deadline.ensure_time_for(200, 'retry') # raises if a 200ms wait would overrun
    """

    def __init__(self, budget_ms: float, clock: Callable[[], float] = time.monotonic):
        self.budget_ms = max(0.0, float(budget_ms))
        self._clock = clock
        self._expires_at = clock() + self.budget_ms / 1000.0

    @classmethod
    def from_context(
        cls,
        context: Any,
        cap_ms: int,
        safety_margin_ms: int = DEFAULT_SAFETY_MARGIN_MS,
        clock: Callable[[], float] = time.monotonic
    ) -> 'Deadline':
        """
        Build a deadline from the Lambda context, capped at cap_ms.

        Contexts without get_remaining_time_in_millis (local calls, tests)
        fall back to the cap.
        """
        budget = float(cap_ms)
        remaining = getattr(context, 'get_remaining_time_in_millis', None)
        if callable(remaining):
            budget = min(budget, float(remaining()) - safety_margin_ms)
        return cls(budget, clock=clock)

    def remaining_ms(self) -> float:
        return max(0.0, (self._expires_at - self._clock()) * 1000.0)

    def expired(self) -> bool:
        return self.remaining_ms() <= 0

    def check(self, operation: str) -> None:
        """Raise RequestTimeoutError if the budget is spent."""
        if self.expired():
            raise RequestTimeoutError(
                f"Request deadline exceeded during '{operation}'",
                {'operation': operation, 'budgetMs': self.budget_ms}
            )

    def ensure_time_for(self, wait_ms: float, operation: str) -> None:
        """Raise RequestTimeoutError if waiting wait_ms would overrun the budget."""
        remaining = self.remaining_ms()
        if remaining <= wait_ms:
            raise RequestTimeoutError(
                f"Request deadline would be exceeded waiting {int(wait_ms)}ms during '{operation}'",
                {'operation': operation, 'budgetMs': self.budget_ms, 'remainingMs': int(remaining)}
            )


class RetryOutcome(NamedTuple):
    """Result of retry_with_backoff: work left undone and retries used."""
    remaining: List[Any]
    retries: int


def retry_with_backoff(
    attempt: Callable[[List[T]], List[T]],
    pending: List[T],
    policy: Optional[BackoffPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
    deadline: Optional[Deadline] = None,
    operation: str = 'retry'
) -> RetryOutcome:
    """
    Retry pending work until it is all done or the policy is exhausted.

    The first attempt has already happened: `pending` is what it left behind.
    Each retry waits for the policy's delay, then calls attempt(pending),
    which must return whatever is still pending.

    Args:
        attempt: Callable processing a list of items and returning the leftovers
        pending: Items left over from the initial attempt
        policy: Backoff policy (defaults to 3 retries, 100ms, x2)
        sleep: Sleep function taking seconds (injectable for tests)
        deadline: Request deadline checked before every wait
        operation: Name used in timeout errors

    Returns:
        RetryOutcome with the still-pending items and the number of retries used

    Raises:
        RequestTimeoutError: If a wait would overrun the deadline
    """
    policy = policy or BackoffPolicy()
    remaining = list(pending)
    retries = 0

    for retry_number in range(1, policy.max_retries + 1):
        if not remaining:
            break

        delay_ms = policy.delay_ms(retry_number)
        if deadline is not None:
            deadline.ensure_time_for(delay_ms, operation)

        sleep(delay_ms / 1000.0)
        remaining = list(attempt(remaining))
        retries = retry_number

    return RetryOutcome(remaining=remaining, retries=retries)
