"""Property-based tests for backoff delays.

Tests invariants of the backoff computation using Hypothesis for
automatic test case generation.
"""

from __future__ import annotations

import math

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from httpbackoff.backoff import JITTER_FRACTION, exponential_backoff_with_jitter
from httpbackoff.response import ResponseInfo

pytestmark = [pytest.mark.property]

delays = st.floats(min_value=0.0, max_value=1e6, allow_nan=False, allow_infinity=False)
attempts = st.integers(min_value=-10, max_value=5000)
draws = st.floats(min_value=0.0, max_value=1.0, exclude_max=True)
statuses = st.integers(min_value=100, max_value=599)


class _Draw:
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def _bounds(min_delay: float, extra: float) -> tuple[float, float]:
    return min_delay, min_delay + extra


class TestBackoffProperties:
    """Property-based tests for exponential_backoff_with_jitter."""

    @given(delays, delays, st.integers(min_value=0, max_value=200))
    def test_unjittered_delay_is_monotonic(self, min_delay, extra, attempt):
        """Without jitter, later attempts never wait less."""
        lo, hi = _bounds(min_delay, extra)
        zero = _Draw(0.0)
        current = exponential_backoff_with_jitter(lo, hi, attempt, rng=zero)
        following = exponential_backoff_with_jitter(lo, hi, attempt + 1, rng=zero)
        assert following >= current

    @given(delays, delays, attempts, draws)
    def test_cap_is_exact(self, min_delay, extra, attempt, draw):
        """Once the exponential base reaches max, max is returned unjittered."""
        lo, hi = _bounds(min_delay, extra)
        base = lo * 2.0 ** min(max(0, attempt), 1000) if lo else 0.0
        delay = exponential_backoff_with_jitter(lo, hi, attempt, rng=_Draw(draw))
        if base >= hi:
            assert delay == hi

    @given(delays, delays, attempts, draws)
    def test_jitter_bound(self, min_delay, extra, attempt, draw):
        """Uncapped delays lie within [base, 1.25 * base]."""
        lo, hi = _bounds(min_delay, extra)
        base = exponential_backoff_with_jitter(lo, hi, attempt, rng=_Draw(0.0))
        delay = exponential_backoff_with_jitter(lo, hi, attempt, rng=_Draw(draw))
        if base < hi:
            assert base <= delay <= base * (1 + JITTER_FRACTION)
        else:
            assert delay == hi

    @given(delays, delays, attempts, draws)
    def test_result_is_non_negative_and_finite(self, min_delay, extra, attempt, draw):
        lo, hi = _bounds(min_delay, extra)
        delay = exponential_backoff_with_jitter(lo, hi, attempt, rng=_Draw(draw))
        assert delay >= 0.0
        assert math.isfinite(delay)

    @given(
        st.integers(min_value=0, max_value=10**6),
        delays,
        delays,
        attempts,
        draws,
    )
    def test_retry_after_precedence(self, seconds, min_delay, extra, attempt, draw):
        """A 429 Retry-After ignores bounds and attempt."""
        lo, hi = _bounds(min_delay, extra)
        response = ResponseInfo(status_code=429, headers={"Retry-After": str(seconds)})
        delay = exponential_backoff_with_jitter(lo, hi, attempt, response, rng=_Draw(draw))
        assert seconds <= delay <= seconds * (1 + JITTER_FRACTION)

    @given(st.text(), delays, delays, attempts, draws)
    def test_malformed_retry_after_matches_no_response(
        self, value, min_delay, extra, attempt, draw
    ):
        """Anything that is not delta-seconds behaves like no response."""
        stripped = value[1:] if value.startswith("+") else value
        assume(not (stripped and all(c in "0123456789" for c in stripped)))
        lo, hi = _bounds(min_delay, extra)
        response = ResponseInfo(status_code=429, headers={"Retry-After": value})
        assert exponential_backoff_with_jitter(
            lo, hi, attempt, response, rng=_Draw(draw)
        ) == exponential_backoff_with_jitter(lo, hi, attempt, rng=_Draw(draw))

    @given(statuses.filter(lambda s: s != 429), delays, delays, attempts, draws)
    def test_non_429_ignores_retry_after(self, status, min_delay, extra, attempt, draw):
        lo, hi = _bounds(min_delay, extra)
        response = ResponseInfo(status_code=status, headers={"Retry-After": "5"})
        assert exponential_backoff_with_jitter(
            lo, hi, attempt, response, rng=_Draw(draw)
        ) == exponential_backoff_with_jitter(lo, hi, attempt, rng=_Draw(draw))
