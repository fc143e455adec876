"""Core value types for tweet_pager.

Everything here is created fresh for one top-level call and either discarded
or handed back to the caller when that call ends.  The request description,
the rate-limit signal and the returned page sequence are frozen dataclasses:
once a page has been handed to the caller it must not change under them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from .constants import DEFAULT_HOST

Params = dict[str, Any]
IdExtractor = Callable[[Any], Sequence[Any]]


class ResponseKind(Enum):
    """Closed set of outcomes a single HTTP response can have."""

    OK = "ok"
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    ERROR = "error"


def classify(status_code: int) -> ResponseKind:
    """Map an HTTP status code to a ``ResponseKind``.

    Depends on the status code alone; headers and body are only looked at by
    the handler chosen for the resulting kind.
    """
    if status_code == 429:
        return ResponseKind.RATE_LIMITED
    if status_code == 401:
        return ResponseKind.UNAUTHORIZED
    if status_code >= 400:
        return ResponseKind.ERROR
    return ResponseKind.OK


def _drop_none(params: Mapping[str, Any] | None) -> Params:
    return {k: v for k, v in (params or {}).items() if v is not None}


@dataclass(frozen=True, slots=True)
class RequestSpec:
    """One API call: method, endpoint path, query parameters, body and host.

    ``api`` is the endpoint path without the ``.json`` suffix, e.g.
    ``/1.1/statuses/user_timeline``.  Parameters whose value is ``None`` are
    dropped so that "unset" and "absent" mean the same thing on the wire.
    """

    method: str
    api: str
    params: Params = field(default_factory=dict)
    body: Any = None
    host: str = DEFAULT_HOST

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "params", _drop_none(self.params))

    @property
    def url(self) -> str:
        return f"https://{self.host}{self.api}.json"

    def with_params(self, **updates: Any) -> "RequestSpec":
        """Return a copy with *updates* merged into the query parameters."""
        merged = {**self.params, **updates}
        return replace(self, params=merged)


@dataclass(frozen=True, slots=True)
class RateLimitSignal:
    """Quota exhaustion for one endpoint, returned instead of a page.

    Attributes:
        api: Endpoint path whose quota ran out.
        reset_at: When the quota window resets (UTC), or ``None`` when the
            server did not say.
        limit: Number of requests that become available at ``reset_at``.
    """

    api: str
    reset_at: datetime | None
    limit: int | None = None

    @property
    def message(self) -> str:
        when = self.reset_at.astimezone().strftime("%H:%M") if self.reset_at else "an unknown time"
        limit = f"{self.limit} more" if self.limit is not None else "more"
        return (
            f"Rate limit exceeded for Twitter endpoint '{self.api}'\n"
            f"Will receive {limit} requests at {when}"
        )

    @classmethod
    def from_reset_seconds(cls, api: str, reset_seconds: float | None, limit: int | None) -> "RateLimitSignal":
        reset_at = None
        if reset_seconds is not None:
            try:
                reset_at = datetime.fromtimestamp(reset_seconds, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                # outside the platform's datetime range; treat as unknown
                reset_at = None
        return cls(api=api, reset_at=reset_at, limit=limit)


@dataclass(frozen=True, slots=True)
class Skipped:
    """Returned in place of a page when the account behind a request is protected."""

    account: str | None = None


class PageBuffer:
    """Append-only page store with explicit geometric growth.

    Capacity starts at *capacity* slots and doubles whenever an append would
    overflow it, so an unbounded walk costs amortised O(1) per page.
    """

    def __init__(self, capacity: int) -> None:
        self._slots: list[Any] = [None] * max(int(capacity), 0)
        self._size = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return self._size

    def append(self, page: Any) -> None:
        if self._size == len(self._slots):
            self._slots.extend([None] * max(len(self._slots), 1))
        self._slots[self._size] = page
        self._size += 1

    def to_tuple(self) -> tuple[Any, ...]:
        return tuple(self._slots[: self._size])


@dataclass(frozen=True, slots=True)
class PageSequence(Sequence):
    """Decoded pages from one paginated call, plus what is needed to resume.

    ``pages`` holds one decoded JSON body per successful request, in request
    order.  ``cursor`` is set by cursor pagination to the value that resumes
    it, ``max_id`` by max-id pagination to the last boundary it requested.
    When a rate limit stopped the walk, ``rate_limit`` holds the signal and
    ``hint`` says which argument value continues from where it stopped.
    """

    pages: tuple[Any, ...] = ()
    cursor: str | None = None
    max_id: str | None = None
    rate_limit: RateLimitSignal | None = None
    hint: str | None = None

    @property
    def terminated_early(self) -> bool:
        return self.rate_limit is not None

    def __len__(self) -> int:
        return len(self.pages)

    def __getitem__(self, index):  # type: ignore[override]
        return self.pages[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.pages)

    def __eq__(self, other: object) -> bool:
        """Compare all fields with another ``PageSequence``; only the pages with a list or tuple."""
        if isinstance(other, PageSequence):
            return (self.pages, self.cursor, self.max_id, self.rate_limit, self.hint) == (
                other.pages, other.cursor, other.max_id, other.rate_limit, other.hint,
            )
        if isinstance(other, (list, tuple)):
            return list(self.pages) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.pages)
