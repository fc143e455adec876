"""Endpoint wrappers for common v1.1 resources.

Each wrapper picks the pagination strategy its endpoint needs and returns
the raw ``PageSequence``; turning pages into records is left to the caller.
A user may be given as a numeric id or a screen name.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .client import TwitterClient
from .constants import (
    FIRST_CURSOR,
    IDS_PAGE_SIZE,
    LOOKUP_BATCH_SIZE,
    RETWEETERS_PAGE_SIZE,
    TIMELINE_PAGE_SIZE,
)
from .models import PageSequence
from .paginate import paginate_chunked, paginate_cursor, paginate_max_id


def user_params(user: str | int) -> dict[str, str]:
    """Return ``{"user_id": ...}`` for numeric ids, else ``{"screen_name": ...}``."""
    value = str(user).strip()
    if not value:
        raise ValueError("user must be a non-empty id or screen name")
    if value.isdigit():
        return {"user_id": value}
    return {"screen_name": value.lstrip("@")}


def _chunks(values: list[str], size: int) -> list[list[str]]:
    return [values[i : i + size] for i in range(0, len(values), size)]


def lookup_params(users: Iterable[str | int], batch_size: int = LOOKUP_BATCH_SIZE) -> list[dict[str, str]]:
    """Split *users* into ``users/lookup`` parameter sets of at most *batch_size*.

    Numeric ids and screen names go into separate batches since each request
    carries only one of ``user_id`` / ``screen_name``.
    """
    user_ids: list[str] = []
    names: list[str] = []
    for user in users:
        params = user_params(user)
        if "user_id" in params:
            user_ids.append(params["user_id"])
        else:
            names.append(params["screen_name"])
    return [
        {"user_id": ",".join(chunk)} for chunk in _chunks(user_ids, batch_size)
    ] + [
        {"screen_name": ",".join(chunk)} for chunk in _chunks(names, batch_size)
    ]


def get_timeline(client: TwitterClient, user: str | int, n: float = 100, **kwargs: Any) -> PageSequence:
    """Most recent statuses posted by *user*, newest first."""
    params = {**user_params(user), "tweet_mode": "extended"}
    return paginate_max_id(
        client, "/1.1/statuses/user_timeline", params,
        n=n, page_size=TIMELINE_PAGE_SIZE, **kwargs,
    )


def get_favorites(
    client: TwitterClient, users: Iterable[str | int], n: float = 200, **kwargs: Any
) -> dict[str, PageSequence]:
    """Statuses liked by each of *users*.

    Results are keyed by ``str(user)``; a user listed more than once is
    fetched once.  A protected account yields one ``ProtectedAccountWarning``
    and an empty ``PageSequence``; the remaining users are still fetched.
    """
    results: dict[str, PageSequence] = {}
    for user in dict.fromkeys(str(u) for u in users):
        params = {**user_params(user), "tweet_mode": "extended"}
        results[user] = paginate_max_id(
            client, "/1.1/favorites/list", params,
            n=n, page_size=TIMELINE_PAGE_SIZE, **kwargs,
        )
    return results


def get_followers(
    client: TwitterClient, user: str | int, n: float = 5000, cursor: Any = FIRST_CURSOR, **kwargs: Any
) -> PageSequence:
    """Ids of accounts following *user*; resume with ``cursor=<result>.cursor``."""
    params = {**user_params(user), "stringify_ids": "true"}
    return paginate_cursor(
        client, "/1.1/followers/ids", params,
        n=n, page_size=IDS_PAGE_SIZE, cursor=cursor, **kwargs,
    )


def get_friends(
    client: TwitterClient, user: str | int, n: float = 5000, cursor: Any = FIRST_CURSOR, **kwargs: Any
) -> PageSequence:
    """Ids of accounts *user* follows; resume with ``cursor=<result>.cursor``."""
    params = {**user_params(user), "stringify_ids": "true"}
    return paginate_cursor(
        client, "/1.1/friends/ids", params,
        n=n, page_size=IDS_PAGE_SIZE, cursor=cursor, **kwargs,
    )


def get_retweeters(
    client: TwitterClient, status_id: str | int, n: float = 100, cursor: Any = FIRST_CURSOR, **kwargs: Any
) -> PageSequence:
    """Ids of users who retweeted *status_id*."""
    params = {"id": str(status_id), "stringify_ids": "true"}
    return paginate_cursor(
        client, "/1.1/statuses/retweeters/ids", params,
        n=n, page_size=RETWEETERS_PAGE_SIZE, cursor=cursor, **kwargs,
    )


def get_retweets(client: TwitterClient, status_id: str | int, n: int = 100, **kwargs: Any) -> Any:
    """Up to 100 most recent retweets of *status_id* (single request)."""
    params = {"count": min(max(int(n), 1), 100), "tweet_mode": "extended"}
    return client.get(f"/1.1/statuses/retweets/{status_id}", params, **kwargs)


def lookup_users(client: TwitterClient, users: Iterable[str | int], **kwargs: Any) -> PageSequence:
    """User objects for *users*, fetched 100 per request."""
    return paginate_chunked(client, "/1.1/users/lookup", lookup_params(users), **kwargs)
