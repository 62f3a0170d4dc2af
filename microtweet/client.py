"""
Authenticated request/response pipeline for the Twitter REST API v1.1.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, NamedTuple, Sequence, TypeVar

from requests.structures import CaseInsensitiveDict

from microtweet.config import ClientSettings, OAuthApplicationCredentials, OAuthUserCredentials
from microtweet.exceptions import ApiError, RateLimitExceeded, TransportFailure
from microtweet.models import Tweet, User, parse_array, parse_json
from microtweet.params import HttpMethod, QueryParameter, place_parameters
from microtweet.reader import read_body
from microtweet.signing import OAuth1Signer, Signer
from microtweet.transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

VERIFY_CREDENTIALS = "account/verify_credentials.json"
STATUSES_UPDATE = "statuses/update.json"
HOME_TIMELINE = "statuses/home_timeline.json"
USER_TIMELINE = "statuses/user_timeline.json"
STATUSES_SHOW = "statuses/show.json"
USERS_SHOW = "users/show.json"


class ApiResponse(NamedTuple):
    """Outcome of one round trip.

    ``body`` is ``content`` decoded as UTF-8 with undecodable bytes replaced;
    ``content`` keeps the bytes exactly as received.
    """

    status_code: int
    body: str
    headers: Mapping[str, str]
    content: bytes


class TwitterClient:
    """Twitter API v1.1 client that signs, sends and decodes requests.

    Every public operation performs exactly one blocking round trip and never
    retries. The credential attributes are plain mutable fields without a
    lock: sharing one client between threads requires the caller to
    serialize access.
    """

    def __init__(
        self,
        application_credentials: OAuthApplicationCredentials,
        user_credentials: OAuthUserCredentials,
        *,
        signer: Signer | None = None,
        transport: Transport | None = None,
        settings: ClientSettings | None = None,
    ) -> None:
        self.application_credentials = application_credentials
        self.user_credentials = user_credentials
        self._settings = settings or ClientSettings()
        self._signer = signer or OAuth1Signer()
        self._transport = transport or RequestsTransport(timeout=self._settings.timeout)
        self._closed = False

    def __enter__(self) -> "TwitterClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._transport.close()

    def endpoint(self, path: str) -> str:
        return f"{self._settings.api_base.rstrip('/')}/{path}"

    def submit_request(
        self,
        method: HttpMethod,
        uri_base: str,
        parameters: Sequence[QueryParameter] | None = None,
    ) -> ApiResponse:
        """
        Submit an authenticated request and return the raw response.

        Args:
            method: HTTP verb; decides whether parameters travel in the query
                string (GET) or in a form encoded body (POST).
            uri_base: Endpoint URI without a query string.
            parameters: Ordered parameters, signed unencoded.

        Raises:
            TransportFailure: when the round trip cannot be completed.
            SigningError: when the request cannot be signed.
        """

        if self._closed:
            raise TransportFailure("The client has been closed.")

        request = place_parameters(method, uri_base, parameters)
        authorization = self._signer.sign(
            method,
            uri_base,
            self.application_credentials,
            self.user_credentials,
            parameters,
        )

        logger.debug("request_started method=%s uri=%s", method.value, uri_base)
        with self._transport.send(request, authorization) as response:
            length = response.content_length
            if length is None:
                raise TransportFailure(f"Response from {uri_base} did not declare a Content-Length.")
            raw = read_body(
                response.stream,
                length,
                strict=self._settings.strict_reads,
                chunk_size=self._settings.read_chunk_size,
            )
            status_code = response.status_code
            headers = CaseInsensitiveDict(response.headers)

        logger.debug(
            "request_finished method=%s uri=%s status=%s bytes=%s",
            method.value,
            uri_base,
            status_code,
            len(raw),
        )
        return ApiResponse(status_code, raw.decode("utf-8", errors="replace"), headers, raw)

    def get_current_user(self) -> User:
        """Verify the user credentials and return the authenticating account."""

        parameters = [QueryParameter("skip_status", "true")]
        return self._fetch(HttpMethod.GET, VERIFY_CREDENTIALS, parameters, User.from_api)

    def send_tweet(self, message: str) -> Tweet:
        """Post ``message`` to the authenticating user's timeline."""

        parameters = [QueryParameter("status", message)]
        return self._fetch(HttpMethod.POST, STATUSES_UPDATE, parameters, Tweet.from_api)

    def get_home_timeline(
        self,
        count: int = 5,
        since_id: int | None = None,
        max_id: int | None = None,
    ) -> list[Tweet]:
        """
        Return the most recent tweets from the authenticating user and the
        accounts they follow, newest first.

        Args:
            count: Maximum number of tweets; the API caps it at 200.
            since_id: Only tweets with an ID greater than this one.
            max_id: Only tweets with an ID less than or equal to this one.
        """

        parameters = self._timeline_parameters(count, since_id, max_id)
        return self._fetch_list(HttpMethod.GET, HOME_TIMELINE, parameters, Tweet.from_api)

    def get_user(
        self,
        *,
        screen_name: str | None = None,
        user_id: int | None = None,
    ) -> User:
        """Return account details for the user given by screen name or ID."""

        parameters = [self._user_selector(screen_name, user_id)]
        return self._fetch(HttpMethod.GET, USERS_SHOW, parameters, User.from_api)

    def get_user_timeline(
        self,
        *,
        screen_name: str | None = None,
        user_id: int | None = None,
        count: int = 5,
        since_id: int | None = None,
        max_id: int | None = None,
    ) -> list[Tweet]:
        """Return the most recent tweets posted by the given user, newest first."""

        parameters = [self._user_selector(screen_name, user_id)]
        parameters.extend(self._timeline_parameters(count, since_id, max_id))
        return self._fetch_list(HttpMethod.GET, USER_TIMELINE, parameters, Tweet.from_api)

    def get_tweet(self, tweet_id: int) -> Tweet:
        parameters = [QueryParameter("id", str(tweet_id))]
        return self._fetch(HttpMethod.GET, STATUSES_SHOW, parameters, Tweet.from_api)

    def _fetch(
        self,
        method: HttpMethod,
        path: str,
        parameters: Sequence[QueryParameter],
        decoder: Callable[["TwitterClient", Any], T],
    ) -> T:
        body = self._expect_success(self.submit_request(method, self.endpoint(path), parameters))
        return decoder(self, parse_json(body))

    def _fetch_list(
        self,
        method: HttpMethod,
        path: str,
        parameters: Sequence[QueryParameter],
        decoder: Callable[["TwitterClient", Any], T],
    ) -> list[T]:
        body = self._expect_success(self.submit_request(method, self.endpoint(path), parameters))
        return parse_array(body, lambda item: decoder(self, item))

    @staticmethod
    def _expect_success(response: ApiResponse) -> str:
        if 200 <= response.status_code < 300:
            return response.body

        logger.warning("api_error status=%s", response.status_code)
        if response.status_code == 429:
            raise RateLimitExceeded(
                response.status_code,
                response.body,
                content=response.content,
                reset_at=_extract_reset_at(response.headers),
            )
        raise ApiError(response.status_code, response.body, content=response.content)

    @staticmethod
    def _user_selector(screen_name: str | None, user_id: int | None) -> QueryParameter:
        if (screen_name is None) == (user_id is None):
            raise ValueError("Specify exactly one of screen_name or user_id.")
        if screen_name is not None:
            return QueryParameter("screen_name", screen_name)
        return QueryParameter("user_id", str(user_id))

    @staticmethod
    def _timeline_parameters(
        count: int,
        since_id: int | None,
        max_id: int | None,
    ) -> list[QueryParameter]:
        parameters = [QueryParameter("count", str(count))]
        if since_id is not None:
            parameters.append(QueryParameter("since_id", str(since_id)))
        if max_id is not None:
            parameters.append(QueryParameter("max_id", str(max_id)))
        return parameters


def _extract_reset_at(headers: Mapping[str, str]) -> int | None:
    reset_value = CaseInsensitiveDict(headers).get("x-rate-limit-reset")
    if reset_value is None:
        return None

    try:
        return int(reset_value)
    except (TypeError, ValueError):
        return None
