"""Exception hierarchy for tweet_pager.

All exceptions raised by this library are subclasses of ``TweetPagerError``
so callers can catch the entire family with a single ``except`` clause when
need be.

Hierarchy::

    TweetPagerError
    ├── APIError            – any non-success Twitter API response
    │   ├── TransportError  – network failure, or an error body that is not JSON
    │   └── DecodeError     – success status but the body is not JSON
    ├── RateLimitError      – HTTP 429 surfaced outside a pagination loop
    └── InvalidTokenError   – credential rejected before any request is made

Two soft conditions are reported as warnings instead of exceptions:
``ProtectedAccountWarning`` (HTTP 401 for one account, the caller keeps
going) and ``EarlyTerminationWarning`` (pagination stopped on a rate limit and
returned partial results).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RateLimitSignal


class TweetPagerError(Exception):
    """Base exception for all tweet_pager errors."""


class APIError(TweetPagerError):
    """Raised when the Twitter API returns an error response.

    Attributes:
        status_code: HTTP status of the failed response, or ``None`` when no
            response was received at all.
        messages: One ``"<message> (<code>)"`` entry per sub-error reported in
            the JSON ``errors`` array.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        messages: tuple[str, ...] = (),
    ):
        super().__init__(message)
        self.status_code = status_code
        self.messages = messages


class TransportError(APIError):
    """Raised on a network-layer failure or an undecodable error response."""


class DecodeError(APIError):
    """Raised when a successful response does not carry a JSON body."""


class RateLimitError(TweetPagerError):
    """Raised when a rate limit is hit and nobody asked to wait for the reset.

    Pagination strategies never see this exception: they receive the
    underlying ``RateLimitSignal`` as a value. It is raised only by the
    single-call helpers (``TwitterClient.get`` / ``TwitterClient.post``).

    Attributes:
        signal: The ``RateLimitSignal`` with endpoint, reset time and limit.
    """

    def __init__(self, signal: "RateLimitSignal"):
        super().__init__(signal.message)
        self.signal = signal

    @property
    def reset_at(self):
        return self.signal.reset_at


class InvalidTokenError(TweetPagerError):
    """Raised when the supplied credential cannot be attached to a request."""


class ProtectedAccountWarning(UserWarning):
    """Issued when a request for one account is refused with HTTP 401."""


class EarlyTerminationWarning(UserWarning):
    """Issued when pagination stops early because of a rate limit."""
