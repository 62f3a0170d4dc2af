"""
Factory for creating Twitter client instances with proper initialization.
"""

from __future__ import annotations

import tweepy

from microtweet.client import TwitterClient
from microtweet.config import ClientSettings, ConfigManager, TwitterCredentials
from microtweet.signing import OAuth1Signer
from microtweet.transport import RequestsTransport


class TwitterClientFactory:
    """Factory for creating properly initialized Twitter API clients."""

    @staticmethod
    def create_from_config(
        config_manager: ConfigManager,
        settings: ClientSettings | None = None,
    ) -> TwitterClient:
        """
        Create a TwitterClient from credentials found by ``config_manager``.

        Raises:
            ConfigurationError: If credentials are missing or invalid
        """
        credentials = config_manager.load_credentials()
        return TwitterClientFactory.create_from_credentials(credentials, settings)

    @staticmethod
    def create_from_credentials(
        credentials: TwitterCredentials,
        settings: ClientSettings | None = None,
    ) -> TwitterClient:
        """
        Create a TwitterClient directly from credentials.

        Args:
            credentials: TwitterCredentials with OAuth 1.0a tokens
            settings: Pipeline settings; defaults to ``ClientSettings()``

        Returns:
            Client signing with tweepy's OAuth 1.0a handler over a requests session

        Raises:
            ConfigurationError: If required credentials are missing
        """
        application = credentials.application()
        user = credentials.user()
        settings = settings or ClientSettings()

        return TwitterClient(
            application,
            user,
            signer=OAuth1Signer(tweepy.OAuth1UserHandler),
            transport=RequestsTransport(timeout=settings.timeout),
            settings=settings,
        )
