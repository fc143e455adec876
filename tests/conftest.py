import json
import sys
from pathlib import Path
from typing import Callable

import httpx
import pytest


# Allow running tests without an installed wheel by adding src/ to sys.path.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tweet_pager.client import Clock, TwitterClient  # noqa: E402
from tweet_pager.config import PagerConfig  # noqa: E402


class FakeClock(Clock):
    """Deterministic clock: ``sleep`` advances ``now`` instead of blocking."""

    def __init__(self, start: float = 1_600_000_000.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def timeline_page(fixtures_dir: Path) -> list:
    return json.loads((fixtures_dir / "timeline_page.json").read_text(encoding="utf-8"))


@pytest.fixture
def followers_page(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "followers_page.json").read_text(encoding="utf-8"))


@pytest.fixture
def error_payload(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "error_response.json").read_text(encoding="utf-8"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(clock: FakeClock) -> Callable[..., TwitterClient]:
    """Build a ``TwitterClient`` whose requests are answered by *handler*."""
    clients: list[TwitterClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], **config_kwargs) -> TwitterClient:
        config_kwargs.setdefault("verbose", False)
        client = TwitterClient(
            "test-token",
            config=PagerConfig(**config_kwargs),
            transport=httpx.MockTransport(handler),
            clock=clock,
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


def rate_limited(reset: float, limit: int = 900) -> httpx.Response:
    return httpx.Response(
        429,
        headers={"x-rate-limit-limit": str(limit), "x-rate-limit-reset": str(int(reset))},
        json={"errors": [{"message": "Rate limit exceeded", "code": 88}]},
    )
