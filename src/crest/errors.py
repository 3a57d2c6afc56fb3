"""Error types raised by the Crest resource tree and its transport."""

from __future__ import annotations


class CrestError(Exception):
    """Base error for Crest.

    Attributes:
        error: Short machine readable code, e.g. ``"invalid-resource"``.
        reason: Human readable description.
    """

    code = "crest-error"

    def __init__(self, reason: str, error: str | None = None) -> None:
        super().__init__(reason)
        self.error = error or self.code
        self.reason = reason


class InvalidOptions(CrestError, ValueError):
    code = "invalid-options"


class InvalidResource(CrestError):
    code = "invalid-resource"


class DuplicateResource(InvalidResource):
    code = "duplicate-resource"


class InvalidContext(CrestError, TypeError):
    code = "invalid-context"


class InvalidParameters(CrestError, ValueError):
    code = "invalid-parameters"


class CallbackRequired(CrestError):
    code = "callback-required"


class MergeTypeError(CrestError, TypeError):
    """A list or mapping was merged with a value of another type."""

    code = "merge-type-error"


class HttpClientError(Exception):
    """Generic transport failure."""


class RequestTimeoutError(HttpClientError):
    """The request did not complete within its timeout."""


class RetryableHttpError(HttpClientError):
    """Connection level failure that a caller may choose to retry."""
