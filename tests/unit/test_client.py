from __future__ import annotations

import io
import json
from contextlib import contextmanager

import pytest

from microtweet.client import ApiResponse, TwitterClient
from microtweet.config import ClientSettings, OAuthApplicationCredentials, OAuthUserCredentials
from microtweet.exceptions import ApiError, MalformedEntity, RateLimitExceeded, TransportFailure
from microtweet.models import Tweet, User
from microtweet.params import HttpMethod, QueryParameter

API = "https://api.twitter.com/1.1"


class StubResponse:
    def __init__(self, status_code: int, body: bytes, headers: dict[str, str] | None = None, *, declared: int | None = None) -> None:
        self.status_code = status_code
        self.headers = headers or {}
        self.content_length = len(body) if declared is None else declared
        self.stream = io.BytesIO(body)


class StubTransport:
    def __init__(self) -> None:
        self.responses: list[StubResponse] = []
        self.requests: list[tuple] = []
        self.released = 0
        self.closed = False

    def queue(self, status_code: int, payload, headers: dict[str, str] | None = None, **kwargs) -> None:
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        self.responses.append(StubResponse(status_code, body, headers, **kwargs))

    @contextmanager
    def send(self, request, authorization):
        self.requests.append((request, authorization))
        try:
            yield self.responses.pop(0)
        finally:
            self.released += 1

    def close(self) -> None:
        self.closed = True


class StubSigner:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def sign(self, method, uri_base, application, user, parameters):
        self.calls.append((method, uri_base, application, user, parameters))
        return "OAuth stub"


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def signer() -> StubSigner:
    return StubSigner()


@pytest.fixture
def client(transport: StubTransport, signer: StubSigner) -> TwitterClient:
    return TwitterClient(
        OAuthApplicationCredentials("app-key", "app-secret"),
        OAuthUserCredentials("user-token", "user-secret"),
        signer=signer,
        transport=transport,
    )


def test_submit_request_signs_once_with_unencoded_parameters(client, transport, signer) -> None:
    transport.queue(200, {"ok": True})
    parameters = [QueryParameter("status", "hello world")]

    response = client.submit_request(HttpMethod.POST, f"{API}/statuses/update.json", parameters)

    assert response == ApiResponse(200, '{"ok": true}', {}, b'{"ok": true}')
    assert len(signer.calls) == 1
    method, uri_base, application, user, signed_parameters = signer.calls[0]
    assert method is HttpMethod.POST
    assert uri_base == f"{API}/statuses/update.json"
    assert application.consumer_key == "app-key"
    assert user.access_token == "user-token"
    assert signed_parameters == parameters
    request, authorization = transport.requests[0]
    assert authorization == "OAuth stub"
    assert request.body == b"status=hello%20world"


def test_send_tweet_posts_status_and_decodes_tweet(client, transport) -> None:
    transport.queue(200, {"id": 42, "text": "hello"})

    tweet = client.send_tweet("hello")

    assert isinstance(tweet, Tweet)
    assert tweet.id == 42
    assert tweet.text == "hello"
    request, _ = transport.requests[0]
    assert request.method is HttpMethod.POST
    assert request.uri == f"{API}/statuses/update.json"
    assert request.body == b"status=hello"
    assert request.headers["Content-Length"] == "12"


def test_get_current_user_skips_status(client, transport) -> None:
    transport.queue(200, {"id": 7, "screen_name": "me"})

    user = client.get_current_user()

    assert isinstance(user, User)
    assert user.screen_name == "me"
    request, _ = transport.requests[0]
    assert request.uri == f"{API}/account/verify_credentials.json?skip_status=true"
    assert request.body is None


def test_home_timeline_sends_only_count_without_bounds(client, transport) -> None:
    transport.queue(200, [{"id": 3}, {"id": 2}, {"id": 1}])

    tweets = client.get_home_timeline(count=5)

    assert [tweet.id for tweet in tweets] == [3, 2, 1]
    request, _ = transport.requests[0]
    assert request.uri == f"{API}/statuses/home_timeline.json?count=5"


def test_home_timeline_includes_pagination_bounds(client, transport) -> None:
    transport.queue(200, [])

    assert client.get_home_timeline(count=20, since_id=100, max_id=200) == []
    request, _ = transport.requests[0]
    assert request.uri == f"{API}/statuses/home_timeline.json?count=20&since_id=100&max_id=200"


@pytest.mark.parametrize(
    ("kwargs", "query"),
    [
        ({"screen_name": "twitter"}, "screen_name=twitter"),
        ({"user_id": 783214}, "user_id=783214"),
    ],
)
def test_get_user_selects_by_screen_name_or_id(client, transport, kwargs, query) -> None:
    transport.queue(200, {"id": 783214, "screen_name": "twitter"})

    user = client.get_user(**kwargs)

    assert user.id == 783214
    request, _ = transport.requests[0]
    assert request.uri == f"{API}/users/show.json?{query}"


@pytest.mark.parametrize("kwargs", [{}, {"screen_name": "twitter", "user_id": 1}])
def test_get_user_requires_exactly_one_selector(client, transport, kwargs) -> None:
    with pytest.raises(ValueError):
        client.get_user(**kwargs)
    assert transport.requests == []


def test_get_user_timeline_by_screen_name(client, transport) -> None:
    transport.queue(200, [{"id": 9, "text": "latest"}])

    tweets = client.get_user_timeline(screen_name="twitter", count=1, max_id=10)

    assert tweets[0].text == "latest"
    request, _ = transport.requests[0]
    assert request.uri == f"{API}/statuses/user_timeline.json?screen_name=twitter&count=1&max_id=10"


def test_get_tweet_by_id(client, transport) -> None:
    transport.queue(200, {"id": 20, "text": "just setting up my twttr"})

    tweet = client.get_tweet(20)

    assert tweet.text == "just setting up my twttr"
    request, _ = transport.requests[0]
    assert request.uri == f"{API}/statuses/show.json?id=20"


def test_non_success_status_raises_api_error_with_raw_body(client, transport) -> None:
    body = b'{"errors":[{"code":50,"message":"User not found."}]}'
    transport.queue(404, body)

    with pytest.raises(ApiError) as exc:
        client.get_user(screen_name="twitter")

    assert exc.value.status_code == 404
    assert exc.value.body == body.decode("utf-8")
    assert not isinstance(exc.value, RateLimitExceeded)


def test_error_body_is_never_decoded(client, transport) -> None:
    transport.queue(500, b"<html>Internal Server Error</html>")

    with pytest.raises(ApiError) as exc:
        client.get_tweet(1)

    assert exc.value.body == "<html>Internal Server Error</html>"


def test_rate_limit_status_raises_rate_limit_exceeded(client, transport) -> None:
    transport.queue(429, {"errors": [{"code": 88}]}, {"x-rate-limit-reset": "1700000000"})

    with pytest.raises(RateLimitExceeded) as exc:
        client.get_home_timeline()

    assert exc.value.status_code == 429
    assert exc.value.reset_at == 1700000000


def test_success_with_unexpected_shape_raises_malformed_entity(client, transport) -> None:
    transport.queue(200, {"id": 1})
    with pytest.raises(MalformedEntity):
        client.get_home_timeline()

    transport.queue(200, b"not json")
    with pytest.raises(MalformedEntity):
        client.get_current_user()


def test_missing_content_length_raises_transport_failure(client, transport) -> None:
    transport.queue(200, {"id": 1})
    transport.responses[0].content_length = None

    with pytest.raises(TransportFailure):
        client.get_current_user()
    assert transport.released == 1


def test_short_body_is_accepted_unless_strict(transport, signer) -> None:
    lenient = TwitterClient(
        OAuthApplicationCredentials("k", "s"),
        OAuthUserCredentials("t", "ts"),
        signer=signer,
        transport=transport,
    )
    transport.queue(200, b'{"id": 1}', declared=50)
    assert lenient.submit_request(HttpMethod.GET, f"{API}/x.json").body == '{"id": 1}'

    strict = TwitterClient(
        OAuthApplicationCredentials("k", "s"),
        OAuthUserCredentials("t", "ts"),
        signer=signer,
        transport=transport,
        settings=ClientSettings(strict_reads=True),
    )
    transport.queue(200, b'{"id": 1}', declared=50)
    with pytest.raises(TransportFailure):
        strict.submit_request(HttpMethod.GET, f"{API}/x.json")
    assert transport.released == 2


def test_entities_call_back_into_their_client(client, transport) -> None:
    transport.queue(200, {"id": 5, "screen_name": "someone"})
    transport.queue(200, [{"id": 11}])

    user = client.get_user(screen_name="someone")
    timeline = user.get_timeline(count=1)

    assert [tweet.id for tweet in timeline] == [11]
    request, _ = transport.requests[1]
    assert request.uri == f"{API}/statuses/user_timeline.json?user_id=5&count=1"


def test_closed_client_refuses_requests(client, transport) -> None:
    transport.queue(200, {"id": 5})
    user = client.get_user(user_id=5)

    with client:
        pass

    assert client.closed
    assert transport.closed
    with pytest.raises(TransportFailure):
        client.get_current_user()
    with pytest.raises(TransportFailure):
        user.get_timeline()


def test_custom_api_base(transport, signer) -> None:
    client = TwitterClient(
        OAuthApplicationCredentials("k", "s"),
        OAuthUserCredentials("t", "ts"),
        signer=signer,
        transport=transport,
        settings=ClientSettings(api_base="http://localhost:8080/1.1/"),
    )
    transport.queue(200, {"id": 1})

    client.get_tweet(1)

    request, _ = transport.requests[0]
    assert request.uri == "http://localhost:8080/1.1/statuses/show.json?id=1"


def test_api_error_keeps_undecodable_body_bytes(client, transport) -> None:
    body = b'{"errors":"\xff\xfe bad bytes"}'
    transport.queue(503, body)

    with pytest.raises(ApiError) as exc:
        client.get_home_timeline()

    assert exc.value.content == body
    assert exc.value.body == body.decode("utf-8", errors="replace")


@pytest.mark.parametrize("header", ["X-RATE-LIMIT-RESET", "X-Rate-Limit-Reset", "x-rate-limit-reset"])
def test_rate_limit_reset_header_lookup_ignores_case(client, transport, header) -> None:
    transport.queue(429, {"errors": [{"code": 88}]}, {header: "1700000123"})

    with pytest.raises(RateLimitExceeded) as exc:
        client.get_tweet(1)

    assert exc.value.reset_at == 1700000123


def test_submit_request_headers_are_case_insensitive(client, transport) -> None:
    transport.queue(200, {"id": 1}, {"X-Rate-Limit-Remaining": "14"})

    response = client.submit_request(HttpMethod.GET, f"{API}/statuses/show.json")

    assert response.headers["x-rate-limit-remaining"] == "14"
