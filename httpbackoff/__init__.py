"""httpbackoff - retry delays for HTTP clients.

Exponential backoff bounded by a minimum and maximum, with additive jitter,
honouring ``Retry-After`` on 429 responses.
"""

from __future__ import annotations

__version__ = "0.1.0"

from httpbackoff.backoff import (
    BackoffCalculator,
    JitterSource,
    exponential_backoff_with_jitter,
    is_capped,
    parse_retry_after,
    retry_after_from_response,
)
from httpbackoff.exceptions import ConfigurationError, HTTPBackoffError
from httpbackoff.response import ResponseInfo

__all__ = [
    "BackoffCalculator",
    "ConfigurationError",
    "HTTPBackoffError",
    "JitterSource",
    "ResponseInfo",
    "__version__",
    "exponential_backoff_with_jitter",
    "is_capped",
    "parse_retry_after",
    "retry_after_from_response",
]
