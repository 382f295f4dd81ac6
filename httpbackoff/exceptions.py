"""Exception hierarchy for httpbackoff.

The backoff computation itself never raises; these errors belong to the
configuration and CLI layers around it.
"""

from __future__ import annotations

from typing import Any, Iterable


class HTTPBackoffError(Exception):
    """Base exception for all httpbackoff errors.

    ``details`` is structured context that :func:`log_exception` attaches to
    the log record instead of folding it into the message.
    """

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(HTTPBackoffError):
    """Configuration could not be loaded or validated.

    Attributes:
        source: Where the rejected values came from, a config file path or
            ``"environment"``. None when not tied to one source.
        errors: One ``"dotted.field: reason"`` line per rejected field.

    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        errors: Iterable[str] = (),
    ):
        self.source = source
        self.errors = list(errors)
        super().__init__(message, source=source, errors=self.errors)

    def __str__(self) -> str:
        text = self.message
        if self.source:
            text = f"{text} ({self.source})"
        if self.errors:
            text = f"{text}: " + "; ".join(self.errors)
        return text
