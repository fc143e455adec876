"""Pagination strategies built on ``TwitterClient.fetch``.

Three strategies share the executor:

* ``paginate_max_id``  – walks a newest-first status stream backwards with a
  strictly decreasing ``max_id`` boundary.
* ``paginate_cursor``  – follows the server's opaque ``next_cursor`` chain,
  where ``"-1"`` is the first page and ``"0"`` the end of the stream.
* ``paginate_chunked`` – issues a pre-built list of parameter sets in order.

Pages are requested strictly one after another.  Retry and verbosity are
resolved against the client's ``PagerConfig`` once, when a strategy is
entered.  A ``RateLimitSignal`` returned by the executor ends the loop: the
pages collected so far come back in a ``PageSequence`` together with the
signal and a resume hint, and an ``EarlyTerminationWarning`` is issued.
``APIError`` and ``DecodeError`` are not caught here; they propagate and the
pages collected so far are lost.
"""

from __future__ import annotations

import logging
import math
import warnings
from collections.abc import Mapping, Sequence
from typing import Any

from tqdm import tqdm

from . import ids
from .client import TwitterClient
from .constants import FIRST_CURSOR, LAST_CURSOR, UNBOUNDED_INITIAL_CAPACITY
from .exceptions import EarlyTerminationWarning
from .models import IdExtractor, PageBuffer, PageSequence, RateLimitSignal, RequestSpec, Skipped

_log = logging.getLogger(__name__)

_PROGRESS_DESC = "Downloading multiple pages"


def status_ids(page: Any) -> list[Any]:
    """Default id extractor for status lists (``[{"id_str": ...}, ...]``).

    Search responses wrap the list in ``{"statuses": [...]}``; both shapes work.
    """
    if isinstance(page, Mapping):
        page = page.get("statuses") or []
    return [s.get("id_str", s.get("id")) for s in page if isinstance(s, Mapping)]


def cursor_ids(page: Any) -> list[Any]:
    """Default id extractor for cursored id lists (``{"ids": [...]}``)."""
    if not isinstance(page, Mapping):
        return []
    return list(page.get("ids") or [])


def warn_early_termination(signal: RateLimitSignal, hint: str | None) -> None:
    """Report that pagination stopped on *signal*, naming how to resume."""
    lines = ["Terminating paginate early due to rate limit.", signal.message]
    if hint:
        lines.append(hint)
    lines.append("Set retry_on_rate_limit=True to automatically wait for reset")
    message = "\n".join(lines)
    _log.warning(message)
    warnings.warn(message, EarlyTerminationWarning, stacklevel=3)


def _boundary(value: Any, reduce) -> str | None:
    """Use a scalar id as given; reduce pages or id collections with *reduce*."""
    if value is None:
        return None
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return str(value).strip()
    return reduce(value)


def _page_count(n: float, page_size: int) -> float:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    if math.isinf(n):
        return math.inf
    return math.ceil(n / page_size)


def paginate_max_id(
    client: TwitterClient,
    api: str,
    params: Mapping[str, Any] | None = None,
    *,
    get_id: IdExtractor = status_ids,
    n: float = 1000,
    page_size: int = 200,
    since_id: Any = None,
    max_id: Any = None,
    count_param: str = "count",
    retry_on_rate_limit: bool | None = None,
    verbose: bool | None = None,
) -> PageSequence:
    """Download up to *n* results from a newest-first endpoint.

    ``ceil(n / page_size)`` pages are requested; the last one asks for
    exactly the remainder.  After each page the next ``max_id`` is one less
    than the smallest id on it, so the boundary strictly decreases.  The walk
    stops early on a page with no ids, on a protected account, or on a rate
    limit with retry disabled.

    *max_id* and *since_id* accept an id, or earlier results to derive one
    from.  The returned ``PageSequence.max_id`` resumes the walk.
    """
    retry = client.config.resolve_retry(retry_on_rate_limit)
    verbose = client.config.resolve_verbose(verbose)
    boundary = _boundary(max_id, ids.max_id)
    base = RequestSpec(
        "GET", api,
        {**(params or {}), "since_id": _boundary(since_id, ids.since_id), count_param: page_size},
        host=client.config.host,
    )

    pages = _page_count(n, page_size)
    buffer = PageBuffer(min(pages, UNBOUNDED_INITIAL_CAPACITY))
    signal: RateLimitSignal | None = None
    hint: str | None = None

    with tqdm(total=pages if math.isfinite(pages) else None, desc=_PROGRESS_DESC, disable=not verbose) as bar:
        i = 0
        while i < pages:
            i += 1
            spec = base.with_params(max_id=boundary)
            if i == pages:
                spec = spec.with_params(**{count_param: int(n - (pages - 1) * page_size)})

            page = client.fetch(spec, retry_on_rate_limit=retry, verbose=verbose)
            if isinstance(page, RateLimitSignal):
                signal = page
                hint = f"Set max_id='{boundary}' to continue." if boundary is not None else None
                warn_early_termination(signal, hint)
                break
            if isinstance(page, Skipped):
                break

            found = get_id(page)
            # no more results
            if len(found) == 0:
                break
            boundary = ids.max_id(found)
            buffer.append(page)
            bar.update(1)

    return PageSequence(buffer.to_tuple(), max_id=boundary, rate_limit=signal, hint=hint)


def _cursor_after(page: Any) -> str:
    """Return the cursor that follows *page*, preferring ``next_cursor_str``.

    A page without any ``next_cursor`` field means the endpoint has nothing
    more to return, which is reported as the end-of-stream cursor.
    """
    if not isinstance(page, Mapping):
        return LAST_CURSOR
    if page.get("next_cursor_str") is not None:
        return str(page["next_cursor_str"])
    if page.get("next_cursor") is not None:
        return str(page["next_cursor"])
    return LAST_CURSOR


def _events_exhausted(page: Any) -> bool:
    # endpoints with an "events" array only keep the last 30 days
    return isinstance(page, Mapping) and "events" in page and not page["events"]


def paginate_cursor(
    client: TwitterClient,
    api: str,
    params: Mapping[str, Any] | None = None,
    *,
    n: float = 5000,
    page_size: int = 5000,
    cursor: Any = FIRST_CURSOR,
    get_id: IdExtractor = cursor_ids,
    retry_on_rate_limit: bool | None = None,
    verbose: bool | None = None,
) -> PageSequence:
    """Follow a ``next_cursor`` chain until *n* ids are seen or it ends.

    Resuming from an exhausted cursor (``"0"``) returns an empty sequence
    without any request.  The returned ``PageSequence.cursor`` is where the
    walk stopped and can be passed back as *cursor* to continue, including
    after a rate-limit stop.
    """
    retry = client.config.resolve_retry(retry_on_rate_limit)
    verbose = client.config.resolve_verbose(verbose)
    current = ids.next_cursor(cursor)
    if current == LAST_CURSOR:
        return PageSequence((), cursor=LAST_CURSOR)

    base = RequestSpec("GET", api, {**(params or {}), "count": page_size}, host=client.config.host)
    results: list[Any] = []
    n_seen = 0
    signal: RateLimitSignal | None = None
    hint: str | None = None

    with tqdm(total=n if math.isfinite(n) else None, desc=_PROGRESS_DESC, disable=not verbose) as bar:
        while True:
            page = client.fetch(base.with_params(cursor=current), retry_on_rate_limit=retry, verbose=verbose)
            if isinstance(page, RateLimitSignal):
                signal = page
                hint = f"Set cursor='{current}' to continue." if current != FIRST_CURSOR else None
                warn_early_termination(signal, hint)
                break
            if isinstance(page, Skipped):
                break

            results.append(page)
            current = _cursor_after(page)
            found = len(get_id(page))
            n_seen += found
            bar.update(found)
            if current == LAST_CURSOR or n_seen >= n or _events_exhausted(page):
                break

    return PageSequence(tuple(results), cursor=current, rate_limit=signal, hint=hint)


def paginate_chunked(
    client: TwitterClient,
    api: str,
    params_list: Sequence[Mapping[str, Any]],
    *,
    retry_on_rate_limit: bool | None = None,
    verbose: bool | None = None,
) -> PageSequence:
    """Issue one request per entry of *params_list*, in order.

    ``result[i]`` is the page for ``params_list[i]`` (``Skipped`` for a
    protected account).  A rate limit stops the loop; no hint is given since
    ``len(result)`` is the index of the first entry that was not fetched.
    """
    retry = client.config.resolve_retry(retry_on_rate_limit)
    verbose = client.config.resolve_verbose(verbose)
    buffer = PageBuffer(len(params_list))
    signal: RateLimitSignal | None = None

    with tqdm(total=len(params_list), desc=_PROGRESS_DESC, disable=not verbose) as bar:
        for params in params_list:
            spec = RequestSpec("GET", api, dict(params), host=client.config.host)
            page = client.fetch(spec, retry_on_rate_limit=retry, verbose=verbose)
            if isinstance(page, RateLimitSignal):
                signal = page
                warn_early_termination(signal, None)
                break
            buffer.append(page)
            bar.update(1)

    return PageSequence(buffer.to_tuple(), rate_limit=signal)
