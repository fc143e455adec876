"""Credential handling.

Signing and the OAuth handshake live elsewhere.  This module only decides
whether a value can be attached to a request: any ``httpx.Auth`` (an OAuth1
signer from a third-party library, say) is used as-is, a plain string is
treated as an app-only bearer token, and everything else is rejected before a
single request goes out.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import httpx

from .exceptions import InvalidTokenError

_INVALID_TOKEN_MSG = "`token` is not a valid access token"


class BearerToken(httpx.Auth):
    """App-only authentication: adds ``Authorization: Bearer <token>``."""

    def __init__(self, token: str) -> None:
        if not token or not token.strip():
            raise InvalidTokenError(_INVALID_TOKEN_MSG)
        self.token = token.strip()

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self.token}"
        yield request

    def __repr__(self) -> str:
        return "BearerToken(<redacted>)"


def check_token(token: Any = None, *, default: str | None = None) -> httpx.Auth:
    """Return an attachable ``httpx.Auth`` for *token* or raise ``InvalidTokenError``.

    ``None`` falls back to *default* (the configured bearer token).
    """
    if token is None:
        token = default
    if isinstance(token, httpx.Auth):
        return token
    if isinstance(token, str) and token.strip():
        return BearerToken(token)
    raise InvalidTokenError(_INVALID_TOKEN_MSG)
