"""Shared CLI argument definitions for tweet_pager.

Every subcommand exposes the same four common arguments (``--token``,
``--host``, ``--retry-on-rate-limit``, ``--quiet``).  This module is the
single source of truth for those argument names, their corresponding
environment variables, and their defaults.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass

from .config import PagerConfig
from .constants import DEFAULT_HOST, ENV_BEARER_TOKEN, ENV_HOST


def _add_token_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--token",
        default=os.environ.get(ENV_BEARER_TOKEN),
        help="App-only bearer token (or set TWITTER_BEARER_TOKEN)",
    )


def _add_host_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--host",
        default=os.environ.get(ENV_HOST, DEFAULT_HOST),
        help="API host (default: api.twitter.com or TWEET_PAGER_HOST)",
    )


def _add_retry_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--retry-on-rate-limit",
        action="store_true",
        default=None,
        help="Wait for the rate limit to reset instead of stopping early",
    )


def _add_quiet_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--quiet", action="store_true", help="Hide progress bars")


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the four shared arguments to *parser*.

    Defaults are resolved from environment variables at call time, so tests
    can monkeypatch env before calling this to control behaviour.
    """
    _add_token_argument(parser)
    _add_host_argument(parser)
    _add_retry_argument(parser)
    _add_quiet_argument(parser)


@dataclass(frozen=True, slots=True)
class CommonArgs:
    """Typed view of the common CLI arguments."""

    api_token:           str | None
    host:                str
    retry_on_rate_limit: bool | None
    verbose:             bool

    @staticmethod
    def from_namespace(ns: argparse.Namespace) -> "CommonArgs":
        """Build a ``CommonArgs`` from a parsed ``argparse.Namespace``."""
        return CommonArgs(
            api_token=(ns.token or "").strip() or None,
            host=ns.host or DEFAULT_HOST,
            retry_on_rate_limit=ns.retry_on_rate_limit,
            verbose=not ns.quiet,
        )

    def to_config(self, base: PagerConfig | None = None) -> PagerConfig:
        """Overlay these arguments on *base* (default: ``PagerConfig.from_env()``)."""
        base = base or PagerConfig.from_env()
        return PagerConfig(
            retry_on_rate_limit=base.resolve_retry(self.retry_on_rate_limit),
            verbose=self.verbose and base.verbose,
            host=self.host,
            timeout_seconds=base.timeout_seconds,
            bearer_token=self.api_token or base.bearer_token,
        )
