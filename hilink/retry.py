"""Bounded retry with backoff for device queries."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


def _always(ex: BaseException) -> bool:
    return True


def _never(ex: BaseException) -> bool:
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """How many times and how long to wait between failed attempts."""

    #: Total number of attempts, including the first one
    attempts: int
    #: Seconds to wait after the failed attempt with the given 0-based index
    backoff: Callable[[int], float]
    #: Errors for which another attempt is made
    is_retryable: Callable[[BaseException], bool] = _always
    #: Errors which are raised immediately regardless of remaining attempts
    is_short_circuit: Callable[[BaseException], bool] = _never

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {self.attempts}")


async def retry_call(func: Callable[[], Awaitable[_T]], policy: RetryPolicy) -> _T:
    """Await func() until it succeeds or the policy gives up.

    The error of the final attempt is raised when all attempts fail.
    Waiting is done with :func:`asyncio.sleep` so the caller can cancel.
    """
    for attempt in range(policy.attempts):
        try:
            return await func()
        except Exception as ex:
            if policy.is_short_circuit(ex) or not policy.is_retryable(ex):
                raise
            if attempt >= policy.attempts - 1:
                _LOGGER.debug("Giving up after %s attempts: %s", attempt + 1, ex)
                raise
            delay = policy.backoff(attempt)
            _LOGGER.debug(
                "Attempt %s failed, retrying in %s seconds: %r", attempt + 1, delay, ex
            )
            await asyncio.sleep(delay)

    # make mypy happy, this should never be reached..
    raise RuntimeError("Retry loop exited without a result")
