import httpx
import pytest

from tweet_pager.auth import BearerToken, check_token
from tweet_pager.client import TwitterClient
from tweet_pager.config import PagerConfig
from tweet_pager.exceptions import InvalidTokenError


def test_string_token_becomes_bearer() -> None:
    auth = check_token("abc")
    assert isinstance(auth, BearerToken)
    assert auth.token == "abc"


def test_httpx_auth_is_used_as_is() -> None:
    auth = httpx.BasicAuth("user", "pass")
    assert check_token(auth) is auth


def test_none_falls_back_to_default() -> None:
    auth = check_token(None, default="from-config")
    assert isinstance(auth, BearerToken)
    assert auth.token == "from-config"


@pytest.mark.parametrize("token", [None, "", "   ", 42, object()])
def test_invalid_tokens_rejected(token) -> None:
    with pytest.raises(InvalidTokenError, match="not a valid access token"):
        check_token(token)


def test_bearer_token_sets_authorization_header() -> None:
    request = httpx.Request("GET", "https://api.twitter.com/1.1/x.json")
    flow = BearerToken("abc").auth_flow(request)
    signed = next(flow)
    assert signed.headers["Authorization"] == "Bearer abc"


def test_bearer_token_repr_hides_secret() -> None:
    assert "abc" not in repr(BearerToken("abc"))


def test_client_rejects_invalid_token_before_any_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    with pytest.raises(InvalidTokenError):
        TwitterClient(None, config=PagerConfig(), transport=httpx.MockTransport(handler))
    assert calls == []


def test_client_uses_configured_bearer_token() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json={})

    config = PagerConfig(bearer_token="env-token", verbose=False)
    with TwitterClient(config=config, transport=httpx.MockTransport(handler)) as client:
        client.get("/1.1/account/settings")
    assert seen == ["Bearer env-token"]
