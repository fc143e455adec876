from __future__ import annotations

import argparse
import json
import logging
import sys

import httpx

from .cli import CommonArgs, add_common_arguments
from .client import TwitterClient
from .endpoints import get_followers, get_timeline, lookup_users
from .exceptions import APIError, InvalidTokenError, RateLimitError
from .models import PageSequence, Skipped

EXIT_OK = 0
EXIT_ERROR = 2
EXIT_RATE_LIMITED = 3


def _parse_n(raw: str) -> float:
    """Accept an integer or ``inf``."""
    value = float(raw)
    if value != float("inf") and (value < 1 or value != int(value)):
        raise argparse.ArgumentTypeError(f"invalid n: {raw}")
    return value if value == float("inf") else int(value)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tweet_pager", description="Download paginated Twitter API results.")
    add_common_arguments(parser)
    sub = parser.add_subparsers(dest="command", required=True)

    timeline = sub.add_parser("timeline", help="Statuses posted by a user (max_id pagination)")
    timeline.add_argument("user")
    timeline.add_argument("--n", type=_parse_n, default=100)
    timeline.add_argument("--max-id", default=None)

    followers = sub.add_parser("followers", help="Follower ids of a user (cursor pagination)")
    followers.add_argument("user")
    followers.add_argument("--n", type=_parse_n, default=5000)
    followers.add_argument("--cursor", default="-1")

    lookup = sub.add_parser("lookup", help="User objects, 100 per request (chunked)")
    lookup.add_argument("users", nargs="+")
    return parser


def _jsonable(page):
    return {"skipped": page.account} if isinstance(page, Skipped) else page


def _write_pages(result: PageSequence) -> None:
    payload = {
        "pages": [_jsonable(page) for page in result],
        "cursor": result.cursor,
        "max_id": result.max_id,
        "hint": result.hint,
    }
    sys.stdout.write(json.dumps(payload) + "\n")


def _run(client: TwitterClient, args: argparse.Namespace) -> PageSequence:
    if args.command == "timeline":
        return get_timeline(client, args.user, n=args.n, max_id=args.max_id)
    if args.command == "followers":
        return get_followers(client, args.user, n=args.n, cursor=args.cursor)
    return lookup_users(client, args.users)


def main(argv: list[str] | None = None, *, transport: httpx.BaseTransport | None = None) -> int:
    """Run one subcommand and print its pages as JSON."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    common = CommonArgs.from_namespace(args)
    try:
        with TwitterClient(config=common.to_config(), transport=transport) as client:
            result = _run(client, args)
    except (APIError, InvalidTokenError, RateLimitError) as exc:
        sys.stderr.write(f"{exc}\n")
        return EXIT_ERROR
    _write_pages(result)
    return EXIT_RATE_LIMITED if result.terminated_early else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
