"""Exponential backoff with jitter for HTTP retries.

Delays are float seconds. A 429 response carrying a delta-seconds
``Retry-After`` header overrides the exponential schedule; every uncapped
delay gets up to 25% of additive jitter so clients that failed together do
not retry together.
"""

from __future__ import annotations

import logging
import math
import random
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from httpbackoff.response import (
    HTTP_TOO_MANY_REQUESTS,
    RETRY_AFTER_HEADER,
    ResponseLike,
    get_first_header,
    get_status_code,
)

if TYPE_CHECKING:  # pragma: no cover
    from httpbackoff.models import BackoffConfig

logger = logging.getLogger(__name__)

JITTER_FRACTION = 0.25

# Largest delay expressible as signed 64-bit nanoseconds.
MAX_RETRY_AFTER_SECONDS = (2**63 - 1) // 1_000_000_000

_RETRY_AFTER_RE = re.compile(r"\+?[0-9]+")


class JitterSource(Protocol):
    """Anything with ``random() -> float`` in ``[0, 1)``, e.g. ``random.Random``."""

    def random(self) -> float: ...


def parse_retry_after(value: str | None) -> int | None:
    """Parse a delta-seconds ``Retry-After`` value.

    Returns None for anything that is not a base-10 non-negative integer,
    including HTTP-date values and numbers too large for a duration.
    """
    if value is None or not _RETRY_AFTER_RE.fullmatch(value):
        return None
    seconds = int(value)
    if seconds > MAX_RETRY_AFTER_SECONDS:
        return None
    return seconds


def retry_after_from_response(response: ResponseLike | None) -> int | None:
    """Return the server-requested delay of a 429 response, if usable."""
    if response is None:
        return None
    if get_status_code(response) != HTTP_TOO_MANY_REQUESTS:
        return None
    headers = getattr(response, "headers", None)
    return parse_retry_after(get_first_header(headers, RETRY_AFTER_HEADER))


def _add_jitter(delay: float, rng: JitterSource) -> float:
    return delay + delay * JITTER_FRACTION * rng.random()


def _exponential(min_delay: float, attempt: int) -> float:
    if min_delay == 0:
        return 0.0
    try:
        return min_delay * math.pow(2.0, attempt)
    except OverflowError:
        return math.inf


def _normalize_bounds(min_delay: float, max_delay: float) -> tuple[float, float]:
    min_delay = max(0.0, min_delay)
    return min_delay, max(max_delay, min_delay)


def is_capped(min_delay: float, max_delay: float, attempt: int) -> bool:
    """Return True when the exponential delay for ``attempt`` is held at the ceiling.

    Bounds are normalized first, so with ``max_delay < min_delay`` every
    attempt is capped at ``min_delay``.
    """
    min_delay, max_delay = _normalize_bounds(min_delay, max_delay)
    base = _exponential(min_delay, max(0, attempt))
    return not math.isfinite(base) or base >= max_delay


def exponential_backoff_with_jitter(
    min_delay: float,
    max_delay: float,
    attempt: int,
    response: ResponseLike | None = None,
    *,
    rng: JitterSource | None = None,
) -> float:
    """Return how many seconds to wait before retry number ``attempt``.

    Args:
        min_delay: Delay for attempt 0, doubled on each later attempt.
        max_delay: Ceiling for the exponential schedule. A capped delay is
            returned exactly, without jitter.
        attempt: Zero-based retry attempt. Negative values count as 0.
        response: Optional prior response. Only a 429 with a parsable
            ``Retry-After`` changes the result; its delay ignores the bounds.
        rng: Jitter source, defaults to the shared ``random`` generator.

    Returns:
        Delay in seconds. Jittered delays may exceed ``max_delay`` by up to 25%.

    """
    source: JitterSource = rng if rng is not None else random

    retry_after = retry_after_from_response(response)
    if retry_after is not None:
        return _add_jitter(float(retry_after), source)

    min_delay, max_delay = _normalize_bounds(min_delay, max_delay)
    if is_capped(min_delay, max_delay, attempt):
        return max_delay
    return _add_jitter(_exponential(min_delay, max(0, attempt)), source)


@dataclass
class BackoffCalculator:
    """Backoff bounds bound to a jitter source."""

    min_delay: float = 1.0
    max_delay: float = 30.0
    rng: JitterSource = field(default=random, repr=False)  # type: ignore[assignment]

    @classmethod
    def from_config(
        cls, config: BackoffConfig, rng: JitterSource | None = None
    ) -> BackoffCalculator:
        """Create a calculator from validated configuration."""
        if rng is None:
            return cls(min_delay=config.min_delay, max_delay=config.max_delay)
        return cls(min_delay=config.min_delay, max_delay=config.max_delay, rng=rng)

    def next_delay(self, attempt: int, response: ResponseLike | None = None) -> float:
        """Calculate the delay for the given retry attempt (0-based)."""
        delay = exponential_backoff_with_jitter(
            self.min_delay,
            self.max_delay,
            attempt,
            response,
            rng=self.rng,
        )
        if logger.isEnabledFor(logging.DEBUG):
            retry_after = retry_after_from_response(response)
            if retry_after is not None:
                logger.debug(
                    "Attempt %d: server requested %ds, waiting %.3fs",
                    attempt,
                    retry_after,
                    delay,
                )
            elif self.is_capped(attempt):
                logger.debug("Attempt %d: capped at %.3fs", attempt, delay)
            else:
                logger.debug("Attempt %d: waiting %.3fs", attempt, delay)
        return delay

    def is_capped(self, attempt: int) -> bool:
        """Return True when ``attempt`` without a response waits the capped delay."""
        return is_capped(self.min_delay, self.max_delay, attempt)

    def schedule(self, attempts: int) -> list[float]:
        """Preview delays for attempts ``0..attempts-1`` with no response."""
        return [self.next_delay(attempt) for attempt in range(max(0, attempts))]
