"""Helpers for turning previous results into pagination boundaries.

Tweet and user IDs exceed the range of a double, so they are handled as
Python ``int`` internally and always sent to the API as decimal strings.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .constants import FIRST_CURSOR
from .models import PageSequence


def _coerce_id(raw: Any) -> int:
    if isinstance(raw, Mapping):
        raw = raw.get("id_str", raw.get("id"))
    if isinstance(raw, bool) or raw is None:
        raise ValueError(f"Not a valid id: {raw!r}")
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise ValueError(f"Not a valid id: {raw!r}") from exc


def _collect_ids(ids: Any) -> list[int]:
    """Flatten *ids* (scalar, iterable, status dicts or pages of them) to ints."""
    if isinstance(ids, (str, int, Mapping)):
        return [_coerce_id(ids)]
    out: list[int] = []
    for item in ids or ():
        if isinstance(item, Iterable) and not isinstance(item, (str, bytes, Mapping)):
            out.extend(_collect_ids(item))
        else:
            out.append(_coerce_id(item))
    return out


def max_id(ids: Any) -> str:
    """Return the ``max_id`` that fetches statuses strictly older than *ids*.

    *ids* may be a single id, an iterable of ids, status dicts carrying
    ``id_str``, or a ``PageSequence`` of such lists.  The result is one less
    than the smallest id, so a walk always moves strictly backwards.
    """
    collected = _collect_ids(ids)
    if not collected:
        raise ValueError("max_id() needs at least one id")
    return str(min(collected) - 1)


def since_id(ids: Any) -> str:
    """Return the ``since_id`` that fetches statuses newer than all of *ids*."""
    collected = _collect_ids(ids)
    if not collected:
        raise ValueError("since_id() needs at least one id")
    return str(max(collected))


def next_cursor(cursor: Any) -> str:
    """Normalise *cursor* to the string form the cursor endpoints expect.

    Accepts ``None`` (first page), a string or int, or a ``PageSequence``
    returned by an earlier cursor walk.
    """
    if isinstance(cursor, PageSequence):
        cursor = cursor.cursor
    if cursor is None:
        return FIRST_CURSOR
    if isinstance(cursor, bool):
        raise ValueError(f"Not a valid cursor: {cursor!r}")
    return str(cursor).strip()
