"""Retry policy for eventually consistent ledger reads.

A node answering a read may not yet have replicated a transaction that was
just written. Reads are therefore resubmitted a small, bounded number of times
until the node either rejects the request or returns data.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

LOGGER = logging.getLogger(__name__)

REJECTED_OPS = ("REJECT", "REQNACK")

Submit = Callable[..., Awaitable[dict]]


def is_rejected(response: Mapping[str, Any]) -> bool:
    """Check whether a ledger response is a rejection."""
    return response.get("op") in REJECTED_OPS


def has_data(response: Mapping[str, Any]) -> bool:
    """Check whether a ledger response carries a non-null result data field."""
    result = response.get("result")
    return isinstance(result, Mapping) and result.get("data") is not None


def rejected_or_has_data(response: Mapping[str, Any]) -> bool:
    """Default stop condition for read retries."""
    return is_rejected(response) or has_data(response)


def linear_backoff(index: int) -> float:
    """Seconds to wait after the attempt at (zero-based) index."""
    return 0.5 * index


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry of a submission until a stop condition is met."""

    max_attempts: int = 3
    backoff: Callable[[int], float] = field(default=linear_backoff)
    stop: Callable[[Mapping[str, Any]], bool] = field(default=rejected_or_has_data)

    async def run(self, submit: Submit, *args) -> dict:
        """Invoke submit up to max_attempts times.

        The last response is returned unchanged when the stop condition is
        never satisfied; no error is raised here.
        """
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        response = {}
        for index in range(self.max_attempts):
            response = await submit(*args)
            if self.stop(response):
                break
            if index + 1 < self.max_attempts:
                delay = self.backoff(index)
                LOGGER.debug(
                    "Ledger response not yet consistent, retrying in %.1fs (%d/%d)",
                    delay,
                    index + 1,
                    self.max_attempts,
                )
                await asyncio.sleep(delay)
        return response

    def wrap(self, submit: Submit) -> Submit:
        """Return submit wrapped by this policy."""

        async def _retrying(*args) -> dict:
            return await self.run(submit, *args)

        return _retrying


DEFAULT_READ_RETRY = RetryPolicy()
