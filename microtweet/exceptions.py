"""
Domain specific exception hierarchy for the microtweet package.
"""


class MicroTweetError(Exception):
    """Base exception for all library errors."""


class ConfigurationError(MicroTweetError):
    """Raised when required configuration or credentials are missing."""


class SigningError(MicroTweetError):
    """Raised when a request could not be signed."""


class TransportFailure(MicroTweetError):
    """Raised when the network round trip could not be completed."""


class ApiError(MicroTweetError):
    """Raised when the Twitter API answers with a non-success status.

    ``content`` holds the response body bytes verbatim and ``body`` their
    UTF-8 text; neither is decoded as an entity.
    """

    def __init__(self, status_code: int, body: str, *, content: bytes | None = None) -> None:
        super().__init__(f"Twitter API returned HTTP {status_code}.")
        self.status_code = status_code
        self.body = body
        self.content = body.encode("utf-8") if content is None else content


class RateLimitExceeded(ApiError):
    """Raised when the Twitter API enforces a rate limit."""

    def __init__(
        self,
        status_code: int,
        body: str,
        *,
        content: bytes | None = None,
        reset_at: int | None = None,
    ) -> None:
        super().__init__(status_code, body, content=content)
        self.reset_at = reset_at


class MalformedEntity(MicroTweetError):
    """Raised when a success body cannot be decoded into the expected entity."""
