"""
OAuth 1.0a request signing on top of tweepy's user handler.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol, Sequence

import tweepy

from microtweet.config import OAuthApplicationCredentials, OAuthUserCredentials
from microtweet.exceptions import SigningError
from microtweet.params import HttpMethod, QueryParameter, place_parameters

logger = logging.getLogger(__name__)


class Signer(Protocol):
    """Produces the ``Authorization`` header value for one request."""

    def sign(
        self,
        method: HttpMethod,
        uri_base: str,
        application: OAuthApplicationCredentials,
        user: OAuthUserCredentials,
        parameters: Sequence[QueryParameter] | None,
    ) -> str:
        ...


class OAuth1Signer:
    """HMAC-SHA1 header signer backed by ``tweepy.OAuth1UserHandler``.

    Canonicalization is left to oauthlib: the logical parameters are laid
    out the same way the request will carry them (query string for GET,
    form body for POST) and oauthlib collects them from there.
    """

    def __init__(
        self,
        handler_factory: Callable[..., Any] = tweepy.OAuth1UserHandler,
    ) -> None:
        self._handler_factory = handler_factory

    def sign(
        self,
        method: HttpMethod,
        uri_base: str,
        application: OAuthApplicationCredentials,
        user: OAuthUserCredentials,
        parameters: Sequence[QueryParameter] | None,
    ) -> str:
        handler = self._handler_factory(
            application.consumer_key,
            application.consumer_secret,
            user.access_token,
            user.access_token_secret,
        )
        oauth_client = handler.apply_auth().client

        view = place_parameters(method, uri_base, parameters)
        body = view.body.decode("utf-8") if view.body is not None else None
        headers = {"Content-Type": view.headers["Content-Type"]} if body is not None else {}

        try:
            _, signed_headers, _ = oauth_client.sign(
                view.uri,
                http_method=method.value,
                body=body,
                headers=headers,
            )
        except ValueError as exc:
            raise SigningError(f"Unable to sign {method.value} {uri_base}: {exc}") from exc

        authorization = signed_headers.get("Authorization")
        if not authorization:
            raise SigningError(f"Signer returned no Authorization header for {uri_base}.")
        if isinstance(authorization, bytes):
            authorization = authorization.decode("utf-8")
        logger.debug("signed method=%s uri=%s", method.value, uri_base)
        return authorization
