"""
Retry with exponential backoff, expressed as a small state machine.

A run moves IDLE -> ATTEMPTING, then either SUCCEEDED, or BACKING_OFF and
back to ATTEMPTING, until the attempts are used up (EXHAUSTED) or a client
error stops it immediately (FAILED).
"""
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, TypeVar

from pydantic import BaseModel, Field

from nps_survey.domains import ErrorCategory, SurveyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryState(str, Enum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    BACKING_OFF = "backing_off"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class RetryPolicy(BaseModel):
    """Attempt limit and base delay (seconds) for exponential backoff."""
    max_attempts: int = Field(3, ge=1)
    base_delay: float = Field(1.0, ge=0)


def should_retry(category: ErrorCategory, attempt: int, max_attempts: int) -> bool:
    """Decide whether a failed attempt is followed by another one.

    Args:
        category: Category of the failure
        attempt: Number of the attempt that just failed, starting at 1
        max_attempts: Attempt limit

    Returns:
        False for client errors or once the limit is reached
    """
    if category.is_client_error:
        return False
    return attempt < max_attempts


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before the attempt following `attempt`: base * 2^(attempt-1)."""
    return base_delay * 2 ** (attempt - 1)


class RetryRun:
    """One operation driven through the retry state machine."""

    def __init__(
        self,
        policy: RetryPolicy,
        sleep: Callable[[float], Awaitable[None]],
        name: str = "operation",
    ):
        self.policy = policy
        self.sleep = sleep
        self.name = name
        self.state = RetryState.IDLE
        self.attempt = 0
        self.delays: List[float] = []
        self.transitions: List[RetryState] = [RetryState.IDLE]
        self.last_error: Optional[SurveyError] = None

    def _transition(self, state: RetryState) -> None:
        self.state = state
        self.transitions.append(state)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        while True:
            self.attempt += 1
            self._transition(RetryState.ATTEMPTING)
            try:
                result = await operation()
            except SurveyError as e:
                self.last_error = e
                if not should_retry(e.category, self.attempt, self.policy.max_attempts):
                    if e.category.is_client_error:
                        self._transition(RetryState.FAILED)
                    else:
                        self._transition(RetryState.EXHAUSTED)
                    raise

                delay = backoff_delay(self.attempt, self.policy.base_delay)
                logger.info(
                    f"{self.name} attempt {self.attempt} failed ({e.category.value}); "
                    f"retrying in {delay}s"
                )
                self._transition(RetryState.BACKING_OFF)
                self.delays.append(delay)
                await self.sleep(delay)
                continue

            self._transition(RetryState.SUCCEEDED)
            return result
