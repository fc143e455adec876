"""Single-request executor for the Twitter REST API.

``TwitterClient`` issues one GET or POST at a time over an ``httpx.Client``
and classifies the response by status code alone (see ``models.classify``).
Each ``ResponseKind`` has exactly one handler:

* ``OK``           – the response is returned (``fetch_json`` decodes it).
* ``UNAUTHORIZED`` – a protected account: one ``ProtectedAccountWarning`` is
  issued and a ``Skipped`` value is returned so loops over many accounts can
  carry on.
* ``RATE_LIMITED`` – a ``RateLimitSignal`` is built from the
  ``x-rate-limit-*`` headers.  With retry enabled the client sleeps until the
  reset time and re-issues the same request once; otherwise the signal is
  returned as a value for the pagination loop to inspect.
* ``ERROR``        – ``APIError`` is raised with one line per reported
  sub-error, or ``TransportError`` if the error body is not JSON.

A success response that is not JSON raises ``DecodeError``.
"""

from __future__ import annotations

import logging
import time
import warnings
from collections.abc import Mapping
from typing import Any, NoReturn, Union

import httpx
from tqdm import tqdm

from .auth import check_token
from .config import PagerConfig
from .exceptions import (
    APIError,
    DecodeError,
    ProtectedAccountWarning,
    RateLimitError,
    TransportError,
)
from .models import RateLimitSignal, RequestSpec, ResponseKind, Skipped, classify

_log = logging.getLogger(__name__)

_SUPPORTED_METHODS = frozenset({"GET", "POST"})
_DEFAULT_WINDOW_SECONDS = 15 * 60
_WAIT_SLICE_SECONDS = 1.0

Outcome = Union[httpx.Response, Skipped, RateLimitSignal]


def _header_int(headers: Mapping[str, str], key: str) -> int | None:
    """Return *key* from *headers* parsed as ``int``, or ``None``."""
    val = headers.get(key)
    if val is None:
        return None
    try:
        return int(float(str(val).strip()))
    except (ValueError, OverflowError):
        return None


class Clock:
    """Wall clock used for rate-limit waits; tests substitute a fake one."""

    def now(self) -> float:
        return time.time()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


def parse_rate_limit(response: httpx.Response, api: str, *, now: float) -> RateLimitSignal:
    """Build a ``RateLimitSignal`` from a 429 response's headers.

    ``x-rate-limit-reset`` (epoch seconds) wins; ``retry-after`` (relative
    seconds) is used when the reset header is missing.
    """
    headers = response.headers
    reset = _header_int(headers, "x-rate-limit-reset")
    if reset is None:
        retry_after = _header_int(headers, "retry-after")
        reset = now + retry_after if retry_after is not None else None
    return RateLimitSignal.from_reset_seconds(api, reset, _header_int(headers, "x-rate-limit-limit"))


def decode_json(response: httpx.Response) -> Any:
    """Return the decoded JSON body of *response* or raise ``DecodeError``."""
    if "application/json" not in response.headers.get("content-type", "").lower():
        raise DecodeError("API did not return json", status_code=response.status_code)
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError("API returned malformed json", status_code=response.status_code) from exc


def _error_lines(payload: Any) -> tuple[str, ...]:
    """Return one ``"<message> (<code>)"`` entry per sub-error in *payload*."""
    if not isinstance(payload, Mapping):
        return ()
    errors = payload.get("errors")
    if isinstance(errors, list):
        return tuple(
            f"{(e or {}).get('message')} ({(e or {}).get('code')})"
            for e in errors
            if isinstance(e, Mapping)
        )
    if isinstance(payload.get("error"), str):
        return (payload["error"],)
    return ()


def raise_api_error(response: httpx.Response) -> NoReturn:
    """Raise the ``APIError`` that describes the failed *response*."""
    status = response.status_code
    try:
        payload = decode_json(response)
    except DecodeError as exc:
        raise TransportError(f"Twitter API failed [{status}]", status_code=status) from exc
    lines = _error_lines(payload)
    message = f"Twitter API failed [{status}]" + "".join(f"\n * {line}" for line in lines)
    raise APIError(message, status_code=status, messages=lines)


def check_status(response: httpx.Response) -> None:
    """Raise ``APIError`` unless *response* classifies as ``OK``.

    Unlike ``TwitterClient.request`` this treats rate limits and protected
    accounts as plain errors.
    """
    if classify(response.status_code) is not ResponseKind.OK:
        raise_api_error(response)


def _decoded(outcome: Outcome) -> Any:
    if isinstance(outcome, httpx.Response):
        return decode_json(outcome)
    return outcome


def protected_account(params: Mapping[str, Any]) -> str | None:
    """Return the account a request was about, from ``screen_name`` or ``user_id``."""
    for key in ("screen_name", "user_id"):
        if params.get(key) is not None:
            return str(params[key])
    return None


class TwitterClient:
    """Rate-limit aware client for ``https://<host><api>.json`` endpoints.

    Instantiation validates the credential (see ``auth.check_token``) so a
    missing token fails before any request is attempted.  ``config`` supplies
    the defaults for every per-call ``retry_on_rate_limit``, ``verbose`` and
    ``host`` argument left as ``None``.
    """

    def __init__(
        self,
        token: Any = None,
        *,
        config: PagerConfig | None = None,
        transport: httpx.BaseTransport | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or PagerConfig()
        self._auth = check_token(token, default=self.config.bearer_token)
        self._client = httpx.Client(timeout=self.config.timeout_seconds, transport=transport)
        self._clock = clock or Clock()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TwitterClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get(self, api: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        """GET *api* and return the decoded JSON body (or ``Skipped``).

        Raises ``RateLimitError`` when the quota is exhausted and retry is off.
        """
        outcome = self.fetch_json(api, params, **kwargs)
        if isinstance(outcome, RateLimitSignal):
            raise RateLimitError(outcome)
        return outcome

    def post(self, api: str, params: Mapping[str, Any] | None = None, *, body: Any = None, **kwargs: Any):
        """POST to *api* and return the raw ``httpx.Response`` (or ``Skipped``)."""
        outcome = self.request("POST", api, params, body=body, **kwargs)
        if isinstance(outcome, RateLimitSignal):
            raise RateLimitError(outcome)
        return outcome

    def fetch_json(self, api: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        """GET *api*; return decoded JSON, ``Skipped`` or a ``RateLimitSignal``."""
        return _decoded(self.request("GET", api, params, **kwargs))

    def fetch(self, spec: RequestSpec, **kwargs: Any) -> Any:
        """Like ``fetch_json`` for an already built ``RequestSpec``."""
        return _decoded(self.execute(spec, **kwargs))

    def request(
        self,
        method: str,
        api: str,
        params: Mapping[str, Any] | None = None,
        *,
        body: Any = None,
        host: str | None = None,
        token: Any = None,
        retry_on_rate_limit: bool | None = None,
        verbose: bool | None = None,
    ) -> Outcome:
        """Issue one request and return its classified ``Outcome``."""
        spec = RequestSpec(method, api, dict(params or {}), body, host or self.config.host)
        return self.execute(spec, token=token, retry_on_rate_limit=retry_on_rate_limit, verbose=verbose)

    def execute(
        self,
        spec: RequestSpec,
        *,
        token: Any = None,
        retry_on_rate_limit: bool | None = None,
        verbose: bool | None = None,
    ) -> Outcome:
        """Issue the request *spec* describes, resolving per-call settings against ``config``."""
        if spec.method not in _SUPPORTED_METHODS:
            raise ValueError(f"Unsupported method: {spec.method!r}")
        auth = self._auth if token is None else check_token(token)
        return self.send(
            spec,
            auth=auth,
            retry=self.config.resolve_retry(retry_on_rate_limit),
            verbose=self.config.resolve_verbose(verbose),
        )

    def send(self, spec: RequestSpec, *, auth: httpx.Auth, retry: bool, verbose: bool) -> Outcome:
        """Perform *spec*; on a rate limit with *retry*, wait and re-issue it once."""
        outcome = self._dispatch(self._perform(spec, auth), spec)
        if isinstance(outcome, RateLimitSignal) and retry:
            self.wait_for_reset(outcome, verbose=verbose)
            outcome = self._dispatch(self._perform(spec, auth), spec)
        return outcome

    def _perform(self, spec: RequestSpec, auth: httpx.Auth) -> httpx.Response:
        """Send *spec* over the transport. Raises ``TransportError``."""
        extra: dict[str, Any] = {}
        if isinstance(spec.body, Mapping):
            extra["data"] = dict(spec.body)
        elif spec.body is not None:
            extra["content"] = spec.body
        try:
            return self._client.request(
                spec.method, spec.url, params=spec.params, auth=auth, **extra
            )
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request to {spec.api} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {spec.api} failed") from exc

    def _dispatch(self, response: httpx.Response, spec: RequestSpec) -> Outcome:
        handlers = {
            ResponseKind.OK: self._on_ok,
            ResponseKind.UNAUTHORIZED: self._on_unauthorized,
            ResponseKind.RATE_LIMITED: self._on_rate_limited,
            ResponseKind.ERROR: self._on_error,
        }
        return handlers[classify(response.status_code)](response, spec)

    @staticmethod
    def _on_ok(response: httpx.Response, spec: RequestSpec) -> Outcome:
        return response

    @staticmethod
    def _on_unauthorized(response: httpx.Response, spec: RequestSpec) -> Outcome:
        account = protected_account(spec.params)
        message = f"Skipping unauthorized account: {account if account is not None else spec.api}"
        _log.warning(message)
        warnings.warn(message, ProtectedAccountWarning, stacklevel=2)
        return Skipped(account)

    def _on_rate_limited(self, response: httpx.Response, spec: RequestSpec) -> Outcome:
        signal = parse_rate_limit(response, spec.api, now=self._clock.now())
        _log.info("Rate limit hit for %s (reset at %s)", spec.api, signal.reset_at)
        return signal

    @staticmethod
    def _on_error(response: httpx.Response, spec: RequestSpec) -> Outcome:
        raise_api_error(response)

    def wait_for_reset(self, signal: RateLimitSignal, *, verbose: bool = True) -> None:
        """Block until ``signal.reset_at`` has passed on the wall clock.

        Sleeps in short slices and re-reads the clock after each wake, so an
        early wake-up or a clock adjustment never cuts the wait short.
        """
        if signal.reset_at is None:
            deadline = self._clock.now() + _DEFAULT_WINDOW_SECONDS
        else:
            deadline = signal.reset_at.timestamp()
        remaining = deadline - self._clock.now()
        _log.warning("Rate limit exceeded for '%s'; waiting %.0fs for reset", signal.api, max(remaining, 0))
        with tqdm(
            total=max(round(remaining), 0),
            desc=f"Waiting for {signal.api} rate limit reset",
            unit="s",
            disable=not verbose,
            leave=False,
        ) as bar:
            while remaining > 0:
                self._clock.sleep(min(remaining, _WAIT_SLICE_SECONDS))
                now_remaining = deadline - self._clock.now()
                bar.update(max(round(remaining - max(now_remaining, 0)), 0))
                remaining = now_remaining
