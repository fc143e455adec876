"""Explicit configuration for tweet_pager calls.

A ``PagerConfig`` is built once (usually from the environment) and handed to
``TwitterClient``.  Per-call arguments left as ``None`` fall back to it; the
fallback happens at the entry of each top-level call and the resolved value
is then fixed for the whole pagination loop.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable, TypeVar

from .constants import (
    DEFAULT_HOST,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_BEARER_TOKEN,
    ENV_HOST,
    ENV_RETRY_ON_RATE_LIMIT,
    ENV_TIMEOUT,
    ENV_VERBOSE,
)

_T = TypeVar("_T")

_TRUE_VALUES  = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(raw)


def _parse_env_var(env: Mapping[str, str], key: str, default: _T, cast: Callable[[str], _T]) -> _T:
    """Return *key* from *env* cast with *cast*; raise ValueError on cast failure."""
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {key}: {raw}") from exc


@dataclass(frozen=True, slots=True)
class PagerConfig:
    """Process-wide defaults for requests and pagination.

    Fields
    ------
    retry_on_rate_limit:
        Wait for the quota window to reset instead of stopping early when a
        call does not say otherwise.
    verbose:
        Show progress bars and rate-limit countdowns on stderr.
    host:
        API host used to build request URLs.
    timeout_seconds:
        Per-request timeout for the underlying ``httpx.Client``.
    bearer_token:
        App-only bearer token used when a call does not pass a credential.
    """

    retry_on_rate_limit: bool = False
    verbose: bool = True
    host: str = DEFAULT_HOST
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    bearer_token: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "PagerConfig":
        """Build a config from ``TWEET_PAGER_*`` and ``TWITTER_BEARER_TOKEN``."""
        effective = os.environ if env is None else env
        token = (effective.get(ENV_BEARER_TOKEN) or "").strip()
        return cls(
            retry_on_rate_limit=_parse_env_var(effective, ENV_RETRY_ON_RATE_LIMIT, False, _parse_bool),
            verbose=_parse_env_var(effective, ENV_VERBOSE, True, _parse_bool),
            host=_parse_env_var(effective, ENV_HOST, DEFAULT_HOST, str.strip) or DEFAULT_HOST,
            timeout_seconds=_parse_env_var(effective, ENV_TIMEOUT, DEFAULT_TIMEOUT_SECONDS, float),
            bearer_token=token or None,
        )

    def resolve_retry(self, explicit: bool | None) -> bool:
        return self.retry_on_rate_limit if explicit is None else bool(explicit)

    def resolve_verbose(self, explicit: bool | None) -> bool:
        return self.verbose if explicit is None else bool(explicit)
