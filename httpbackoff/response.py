"""Response descriptors consumed by the backoff calculator.

Only the status code and the ``Retry-After`` header of a prior response
matter for backoff decisions. Responses from the common HTTP clients are read
through duck typing so callers can pass them in directly:

- aiohttp: ``status`` plus a case-insensitive multidict (``getall``)
- httpx: ``status_code`` plus ``Headers`` (``get_list``)
- requests: ``status_code`` plus a case-insensitive mapping
- urllib / http.client: ``status`` plus an ``email.message.Message`` (``get_all``)
- :class:`ResponseInfo`: ``status_code`` plus a plain mapping
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, Union

HTTP_TOO_MANY_REQUESTS = 429
RETRY_AFTER_HEADER = "Retry-After"

HeaderValues = Union[str, Sequence[str]]


class ResponseLike(Protocol):
    """Minimal view of an HTTP response."""

    headers: Any


@dataclass(frozen=True)
class ResponseInfo:
    """Status code and headers of a response that prompted a retry."""

    status_code: int
    headers: Mapping[str, HeaderValues] = field(default_factory=dict)


def get_status_code(response: Any) -> int | None:
    """Return the integer status of a response-like object, if it has one."""
    for attr in ("status_code", "status"):
        value = getattr(response, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def get_header_values(headers: Any, name: str) -> list[str]:
    """Return every value of header ``name``, matched case-insensitively."""
    if headers is None:
        return []

    getall = getattr(headers, "getall", None)
    if callable(getall):
        return [str(v) for v in getall(name, [])]

    get_all = getattr(headers, "get_all", None)
    if callable(get_all):
        return [str(v) for v in get_all(name) or []]

    # httpx joins repeated headers with ", " in items()
    get_list = getattr(headers, "get_list", None)
    if callable(get_list):
        return [str(v) for v in get_list(name)]

    if not isinstance(headers, Mapping):
        return []

    wanted = name.lower()
    for key, value in headers.items():
        if not isinstance(key, str) or key.lower() != wanted:
            continue
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return [str(value)]
    return []


def get_first_header(headers: Any, name: str) -> str | None:
    """Return the first value of header ``name`` or None when absent."""
    values = get_header_values(headers, name)
    return values[0] if values else None


__all__ = [
    "HTTP_TOO_MANY_REQUESTS",
    "RETRY_AFTER_HEADER",
    "ResponseInfo",
    "ResponseLike",
    "get_first_header",
    "get_header_values",
    "get_status_code",
]
