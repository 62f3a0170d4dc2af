"""
microtweet - a small Twitter API v1.1 client.
"""

from microtweet.client import ApiResponse, TwitterClient
from microtweet.config import (
    ClientSettings,
    ConfigManager,
    OAuthApplicationCredentials,
    OAuthUserCredentials,
    TwitterCredentials,
)
from microtweet.exceptions import (
    ApiError,
    ConfigurationError,
    MalformedEntity,
    MicroTweetError,
    RateLimitExceeded,
    SigningError,
    TransportFailure,
)
from microtweet.factory import TwitterClientFactory
from microtweet.models import Tweet, User
from microtweet.params import HttpMethod, QueryParameter

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ApiResponse",
    "ClientSettings",
    "ConfigManager",
    "ConfigurationError",
    "HttpMethod",
    "MalformedEntity",
    "MicroTweetError",
    "OAuthApplicationCredentials",
    "OAuthUserCredentials",
    "QueryParameter",
    "RateLimitExceeded",
    "SigningError",
    "TransportFailure",
    "Tweet",
    "TwitterClient",
    "TwitterClientFactory",
    "TwitterCredentials",
    "User",
]
